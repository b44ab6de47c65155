from __future__ import annotations

import re
from typing import Any, Iterable

from leadform.config import FIELD_TYPES, OPTION_TYPES
from leadform.utils import generate_field_id

DEFAULT_OPTIONS = ["Option 1", "Option 2"]


def new_field(field_type: str, existing_ids: Iterable[str] = ()) -> dict[str, Any]:
    if field_type not in FIELD_TYPES:
        raise ValueError(f"Unknown field type: {field_type}")
    field: dict[str, Any] = {
        "id": generate_field_id(set(existing_ids)),
        "type": field_type,
        "label": f"New {field_type} field",
        "placeholder": "",
        "required": False,
        "options": list(DEFAULT_OPTIONS) if field_type in OPTION_TYPES else [],
        "validation": {},
    }
    return field


def _number_or_none(value: Any) -> float | int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else number


def normalize_validation(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    validation: dict[str, Any] = {}
    for key in ("min", "max"):
        number = _number_or_none(raw.get(key))
        if number is not None:
            validation[key] = number
    pattern = raw.get("pattern")
    if isinstance(pattern, str) and pattern.strip():
        validation["pattern"] = pattern.strip()
    return validation


def normalize_options(raw: Any) -> list[str]:
    if isinstance(raw, str):
        raw = raw.splitlines()
    if not isinstance(raw, (list, tuple)):
        return []
    return [str(option).strip() for option in raw if str(option).strip()]


def normalize_field(raw: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(raw.get("id", "")).strip(),
        "type": str(raw.get("type", "text")).strip() or "text",
        "label": str(raw.get("label") or "").strip(),
        "placeholder": str(raw.get("placeholder") or "").strip(),
        "required": bool(raw.get("required")),
        "options": normalize_options(raw.get("options")),
        "validation": normalize_validation(raw.get("validation")),
    }


def anchored_pattern(pattern: str) -> str | None:
    """Full-string form of a field pattern, or None when it does not compile."""
    anchored = f"^(?:{pattern})\\Z"
    try:
        re.compile(anchored)
    except re.error:
        return None
    return anchored


def check_fields(fields: list[dict[str, Any]]) -> list[str]:
    problems: list[str] = []
    if not fields:
        problems.append("At least one field is required")
    seen_ids: set[str] = set()
    for index, field in enumerate(fields, start=1):
        loc = f"Field {index}"
        field_id = field.get("id", "")
        if not field_id:
            problems.append(f"{loc}: id is missing")
        elif field_id in seen_ids:
            problems.append(f"{loc}: duplicate id ({field_id})")
        else:
            seen_ids.add(field_id)
        if not field.get("label"):
            problems.append(f"{loc}: label is required")
        if field.get("type") in OPTION_TYPES and not field.get("options"):
            problems.append(f"{loc}: add at least one option")
        pattern = (field.get("validation") or {}).get("pattern")
        if pattern and anchored_pattern(pattern) is None:
            problems.append(f"{loc}: pattern is not a valid regular expression")
    return problems


def initial_value(field: dict[str, Any]) -> Any:
    if field.get("type") == "checkbox":
        return []
    return ""


def coerce_value(field: dict[str, Any], raw: Any) -> Any:
    if field.get("type") == "checkbox":
        if raw is None:
            return []
        if isinstance(raw, str):
            return [raw] if raw else []
        if isinstance(raw, (list, tuple, set, frozenset)):
            return [str(item) for item in raw]
        return raw
    if raw is None:
        return ""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    return raw


def find_field(fields: list[dict[str, Any]], field_id: str) -> dict[str, Any] | None:
    for field in fields:
        if field.get("id") == field_id:
            return field
    return None
