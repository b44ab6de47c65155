from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from leadform.app import create_app
from leadform.config import Settings
from leadform.repo_json import JSONFormStore


class WebhookRecorder:
    def __init__(self, fail: bool = False) -> None:
        self.requests: list[httpx.Request] = []
        self.fail = fail

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"ok": True})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def sent_payloads(self) -> list[Any]:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("STORAGE_BACKEND", "json")
    monkeypatch.setenv("JSON_PATH", str(tmp_path / "forms.json"))
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "forms.db"))
    monkeypatch.setenv("BASE_URL", "https://forms.example.com")
    return Settings()


@pytest.fixture
def store(tmp_path: Path) -> JSONFormStore:
    return JSONFormStore(tmp_path / "store.json")


@pytest.fixture
def webhook() -> WebhookRecorder:
    return WebhookRecorder()


@pytest.fixture
def client(settings: Settings, store: JSONFormStore, webhook: WebhookRecorder) -> TestClient:
    app = create_app(settings, store=store, webhook_transport=webhook.transport)
    with TestClient(app) as test_client:
        yield test_client


def scenario_config(**overrides: Any) -> dict[str, Any]:
    config: dict[str, Any] = {
        "id": "lead-1",
        "title": "Property Lead",
        "description": "",
        "submit_button_text": "Send",
        "success_message": "Thanks, we will be in touch.",
        "webhook_url": "",
        "primary_color": "#3b82f6",
        "background_color": "#ffffff",
        "border_radius": 8,
        "fields": [
            {
                "id": "location",
                "type": "text",
                "label": "Location",
                "placeholder": "",
                "required": True,
                "options": [],
                "validation": {},
            },
            {
                "id": "property_type",
                "type": "select",
                "label": "Property Type",
                "placeholder": "",
                "required": True,
                "options": ["House", "Apartment", "Plot"],
                "validation": {},
            },
        ],
        "created_at": "2025-01-01T00:00:00+00:00",
        "updated_at": "2025-01-01T00:00:00+00:00",
    }
    config.update(overrides)
    return config


@pytest.fixture
def make_config():
    return scenario_config
