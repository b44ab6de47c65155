from __future__ import annotations

import copy
from datetime import datetime
from typing import TYPE_CHECKING, Any

from leadform.errors import FieldNotFoundError, InvalidFormError, MalformedConfigError
from leadform.fields import check_fields, find_field, new_field, normalize_field
from leadform.utils import generate_field_id, new_ulid, now_utc, to_iso
from leadform.webhook import is_valid_webhook_url

if TYPE_CHECKING:
    from leadform.store import FormStore

DEFAULT_FORM_ID = "default"

SETTING_KEYS = (
    "title",
    "description",
    "submit_button_text",
    "success_message",
    "webhook_url",
    "primary_color",
    "background_color",
    "border_radius",
)

BUILDER_DEFAULTS: dict[str, Any] = {
    "title": "Property Value Estimator",
    "description": "Get an instant estimate of your property value",
    "submit_button_text": "Estimate Value",
    "success_message": "Thank you! We'll get back to you soon.",
    "webhook_url": "",
    "primary_color": "#3b82f6",
    "background_color": "#ffffff",
    "border_radius": 8,
}

DEFAULT_FORM_CONFIG: dict[str, Any] = {
    "id": DEFAULT_FORM_ID,
    **BUILDER_DEFAULTS,
    "primary_color": "#041e48",
    "background_color": "#eee9e9",
    "fields": [
        {
            "id": "location",
            "type": "text",
            "label": "Location",
            "placeholder": "e.g. DHA Phase 6, Lahore",
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
    "created_at": "2025-10-27T18:47:53.376000+00:00",
    "updated_at": "2025-10-27T18:47:53.376000+00:00",
}


def _field(field_id: str, field_type: str, label: str, **extra: Any) -> dict[str, Any]:
    return normalize_field({"id": field_id, "type": field_type, "label": label, **extra})


PRESET_FORMS: dict[str, dict[str, Any]] = {
    "phone-lead": {
        "id": "phone-lead",
        **BUILDER_DEFAULTS,
        "title": "Request a Call Back",
        "description": "Leave your number and our team will contact you",
        "submit_button_text": "Call Me",
        "success_message": "Thanks! We'll call you shortly.",
        "fields": [
            _field(
                "phone",
                "text",
                "Phone Number",
                placeholder="+92 300 1234567",
                required=True,
                validation={"pattern": r"[0-9+\-\s()]{10,}"},
            ),
        ],
        "created_at": DEFAULT_FORM_CONFIG["created_at"],
        "updated_at": DEFAULT_FORM_CONFIG["updated_at"],
    },
    "property-estimator": {
        "id": "property-estimator",
        **BUILDER_DEFAULTS,
        "fields": [
            _field("location", "text", "Location", placeholder="e.g. DHA Phase 6, Lahore", required=True),
            _field("property_type", "select", "Property Type", required=True, options=["House", "Apartment", "Plot"]),
            _field("area", "number", "Area (sq ft)", required=True, validation={"min": 1}),
            _field("bedrooms", "number", "Bedrooms", required=True, validation={"min": 0}),
            _field("bathrooms", "number", "Bathrooms", required=True, validation={"min": 0}),
            _field(
                "condition",
                "select",
                "Condition",
                required=True,
                options=["Excellent", "Good", "Average", "Needs Renovation"],
            ),
        ],
        "created_at": DEFAULT_FORM_CONFIG["created_at"],
        "updated_at": DEFAULT_FORM_CONFIG["updated_at"],
    },
}


def default_form_config() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_FORM_CONFIG)


def new_form_config(**overrides: Any) -> dict[str, Any]:
    ids: set[str] = set()
    fields: list[dict[str, Any]] = []
    for field_type, label, extra in (
        ("text", "Location", {"placeholder": "e.g. DHA Phase 6, Lahore", "required": True}),
        ("select", "Property Type", {"required": True, "options": ["House", "Apartment", "Plot"]}),
        ("number", "Area (sq ft)", {"placeholder": "Enter total area", "required": True}),
    ):
        field_id = generate_field_id(ids)
        ids.add(field_id)
        fields.append(_field(field_id, field_type, label, **extra))
    config: dict[str, Any] = {
        "id": new_ulid(),
        **BUILDER_DEFAULTS,
        "fields": fields,
        "created_at": None,
        "updated_at": None,
    }
    config.update(overrides)
    return config


def _border_radius(value: Any) -> int:
    try:
        radius = int(value)
    except (TypeError, ValueError):
        return 0
    return max(radius, 0)


def normalize_settings(raw: dict[str, Any]) -> dict[str, Any]:
    settings: dict[str, Any] = {}
    for key in SETTING_KEYS:
        if key not in raw:
            continue
        if key == "border_radius":
            settings[key] = _border_radius(raw[key])
        else:
            settings[key] = str(raw[key] or "").strip()
    return settings


def parse_form_config(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise MalformedConfigError("configuration is not an object")
    form_id = raw.get("id")
    if not isinstance(form_id, str) or not form_id:
        raise MalformedConfigError("configuration has no id")
    raw_fields = raw.get("fields")
    if not isinstance(raw_fields, list):
        raise MalformedConfigError(f"configuration {form_id} has no field list")
    fields: list[dict[str, Any]] = []
    for raw_field in raw_fields:
        if not isinstance(raw_field, dict) or not raw_field.get("id"):
            raise MalformedConfigError(f"configuration {form_id} has an invalid field")
        fields.append(normalize_field(raw_field))

    config: dict[str, Any] = {"id": form_id, **BUILDER_DEFAULTS}
    config.update(normalize_settings(raw))
    config["fields"] = fields
    config["created_at"] = raw.get("created_at")
    config["updated_at"] = raw.get("updated_at")
    return config


def check_form(config: dict[str, Any]) -> list[str]:
    problems = check_fields(config.get("fields") or [])
    webhook_url = config.get("webhook_url") or ""
    if webhook_url and not is_valid_webhook_url(webhook_url):
        problems.append("Webhook URL must be an absolute http:// or https:// URL")
    return problems


def stamp_for_save(
    config: dict[str, Any],
    existing: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    stamped = copy.deepcopy(config)
    stamped["id"] = stamped.get("id") or new_ulid()
    timestamp = to_iso(now or now_utc())
    created_at = (existing or {}).get("created_at") or stamped.get("created_at")
    stamped["created_at"] = created_at or timestamp
    stamped["updated_at"] = timestamp
    return stamped


class FormBuilder:
    """In-memory draft of a form configuration.

    Every mutation only touches the draft; ``save`` writes one snapshot.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = copy.deepcopy(config) if config else new_form_config()

    @property
    def fields(self) -> list[dict[str, Any]]:
        return self.config["fields"]

    def _get(self, field_id: str) -> dict[str, Any]:
        field = find_field(self.fields, field_id)
        if field is None:
            raise FieldNotFoundError(field_id)
        return field

    def add_field(self, field_type: str) -> dict[str, Any]:
        field = new_field(field_type, (f["id"] for f in self.fields))
        self.fields.append(field)
        return field

    def update_field(self, field_id: str, **updates: Any) -> dict[str, Any]:
        field = self._get(field_id)
        updates.pop("id", None)
        merged = normalize_field({**field, **updates})
        field.clear()
        field.update(merged)
        return field

    def remove_field(self, field_id: str) -> None:
        field = self._get(field_id)
        self.fields.remove(field)

    def move_field(self, field_id: str, offset: int) -> None:
        field = self._get(field_id)
        index = self.fields.index(field)
        target = min(max(index + offset, 0), len(self.fields) - 1)
        self.fields.insert(target, self.fields.pop(index))

    def update_settings(self, **updates: Any) -> None:
        self.config.update(normalize_settings(updates))

    def problems(self) -> list[str]:
        return check_form(self.config)

    def save(self, store: FormStore) -> str:
        problems = self.problems()
        if problems:
            raise InvalidFormError(problems)
        form_id = store.save(self.config)
        saved = store.load(form_id)
        self.config = saved if saved is not None else {**self.config, "id": form_id}
        return form_id
