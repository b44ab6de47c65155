from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping

from leadform.errors import SessionClosedError
from leadform.fields import coerce_value, initial_value
from leadform.schema import compile_schema, validate_values
from leadform.utils import now_utc, to_iso
from leadform.webhook import send_webhook

logger = logging.getLogger(__name__)

WebhookSender = Callable[[str, dict[str, Any]], Awaitable[bool]]


class FormState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


def initial_values(config: dict[str, Any]) -> dict[str, Any]:
    return {field["id"]: initial_value(field) for field in config.get("fields") or []}


def collect_form_values(config: dict[str, Any], form_data: Any) -> dict[str, Any]:
    """Read field values out of a posted HTML form (a starlette FormData)."""
    values: dict[str, Any] = {}
    for field in config.get("fields") or []:
        key = field["id"]
        if field.get("type") == "checkbox":
            values[key] = [str(v) for v in form_data.getlist(key) if v not in (None, "")]
        else:
            raw_value = form_data.get(key)
            values[key] = str(raw_value) if raw_value is not None else ""
    return values


def build_payload(config: dict[str, Any], data: dict[str, Any], submitted_at: datetime) -> dict[str, Any]:
    return {
        "formId": config.get("id"),
        "formTitle": config.get("title", ""),
        "submittedAt": to_iso(submitted_at),
        "data": data,
    }


class FormSession:
    """One mounted instance of a rendered form.

    editing -> submitting -> submitted; a failed validation stays in editing
    and ``submitted`` is terminal.
    """

    def __init__(
        self,
        config: dict[str, Any],
        sender: WebhookSender | None = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.config = config
        self.schema = compile_schema(config)
        self.state = FormState.EDITING
        self.values = initial_values(config)
        self.errors: dict[str, str] = {}
        self._fields = {field["id"]: field for field in config.get("fields") or []}
        self._sender = sender or send_webhook
        self._clock = clock

    @property
    def success_message(self) -> str:
        return self.config.get("success_message", "")

    def _ensure_editing(self) -> None:
        if self.state is not FormState.EDITING:
            raise SessionClosedError(f"form session is {self.state.value}")

    def set_value(self, field_id: str, value: Any) -> None:
        self._ensure_editing()
        field = self._fields[field_id]
        self.values[field_id] = coerce_value(field, value)

    def toggle_option(self, field_id: str, option: str, checked: bool) -> None:
        self._ensure_editing()
        field = self._fields[field_id]
        if field.get("type") != "checkbox":
            raise ValueError(f"{field_id} is not a checkbox field")
        current = [v for v in self.values[field_id] if v != option]
        if checked:
            current.append(option)
        self.values[field_id] = current

    async def submit(self, values: Mapping[str, Any] | None = None) -> bool:
        self._ensure_editing()
        for field_id, value in (values or {}).items():
            field = self._fields.get(field_id)
            if field is not None:
                self.values[field_id] = coerce_value(field, value)

        self.errors = validate_values(self.schema, self.values)
        if self.errors:
            return False

        self.state = FormState.SUBMITTING
        webhook_url = self.config.get("webhook_url")
        if webhook_url:
            payload = build_payload(self.config, dict(self.values), self._clock())
            try:
                await self._sender(webhook_url, payload)
            except Exception:
                logger.exception("Webhook sender failed for %s", self.config.get("id"))
        else:
            logger.debug("No webhook configured for %s", self.config.get("id"))

        self.state = FormState.SUBMITTED
        self.values = initial_values(self.config)
        return True
