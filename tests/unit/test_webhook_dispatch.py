"""Webhook dispatch tests."""

from __future__ import annotations

import asyncio
import json

import httpx

from leadform.webhook import is_valid_webhook_url, send_webhook

PAYLOAD = {"formId": "lead-1", "formTitle": "Lead", "submittedAt": "2025-01-01T00:00:00+00:00", "data": {}}


def test_is_valid_webhook_url() -> None:
    assert is_valid_webhook_url("https://hooks.example.com/x")
    assert is_valid_webhook_url("http://localhost:9000")
    assert not is_valid_webhook_url("")
    assert not is_valid_webhook_url("ftp://hooks.example.com")
    assert not is_valid_webhook_url("/relative")


def test_send_webhook_posts_json(webhook) -> None:
    sent = asyncio.run(send_webhook("https://hooks.example.com/x", PAYLOAD, transport=webhook.transport))
    assert sent is True
    (request,) = webhook.requests
    assert request.method == "POST"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == PAYLOAD


def test_error_status_still_counts_as_completed() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    assert asyncio.run(send_webhook("https://hooks.example.com/x", PAYLOAD, transport=transport)) is True


def test_transport_failure_returns_false(webhook) -> None:
    webhook.fail = True
    assert asyncio.run(send_webhook("https://hooks.example.com/x", PAYLOAD, transport=webhook.transport)) is False
    assert len(webhook.requests) == 1


def test_invalid_url_is_not_called(webhook) -> None:
    assert asyncio.run(send_webhook("mailto:ops@example.com", PAYLOAD, transport=webhook.transport)) is False
    assert webhook.requests == []
