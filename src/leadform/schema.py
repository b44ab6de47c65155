from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, Iterator

from jsonschema import Draft7Validator, FormatChecker, ValidationError, validators

from leadform.config import FREE_TEXT_TYPES
from leadform.fields import anchored_pattern

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(
    r"^(?!\.)(?!.*\.\.)[A-Za-z0-9_'+\-.]*[A-Za-z0-9_+\-]@(?:[A-Za-z0-9][A-Za-z0-9\-]*\.)+[A-Za-z]{2,}$"
)

MESSAGES = {
    "type": "Invalid value",
    "format": "Invalid email address",
    "enum": "Please select a valid option",
    "pattern": "Invalid format",
}

# type mismatches are reported before emptiness, emptiness before everything else
KEYWORD_PRIORITY = {"type": 0, "minLength": 1, "minItems": 1}


def parse_number(value: Any) -> float | None:
    if not isinstance(value, str) or "_" in value or not value.strip():
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _format_number(value: float | int) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _number_keyword(validator: Any, enabled: Any, instance: Any, schema: dict) -> Iterator[ValidationError]:
    if enabled and isinstance(instance, str) and parse_number(instance) is None:
        yield ValidationError("Must be a valid number")


def _minimum_keyword(validator: Any, minimum: Any, instance: Any, schema: dict) -> Iterator[ValidationError]:
    number = parse_number(instance)
    if number is not None and number < minimum:
        yield ValidationError(f"Minimum value is {_format_number(minimum)}")


def _maximum_keyword(validator: Any, maximum: Any, instance: Any, schema: dict) -> Iterator[ValidationError]:
    number = parse_number(instance)
    if number is not None and number > maximum:
        yield ValidationError(f"Maximum value is {_format_number(maximum)}")


FieldValidator = validators.extend(
    Draft7Validator,
    {
        "x-number": _number_keyword,
        "x-minimum": _minimum_keyword,
        "x-maximum": _maximum_keyword,
    },
)

format_checker = FormatChecker(formats=())


@format_checker.checks("email")
def _is_email(instance: Any) -> bool:
    if not isinstance(instance, str):
        return True
    return bool(EMAIL_PATTERN.match(instance))


def _anchored_pattern(field: dict[str, Any]) -> str | None:
    pattern = (field.get("validation") or {}).get("pattern")
    if not pattern:
        return None
    anchored = anchored_pattern(pattern)
    if anchored is None:
        logger.warning("Ignoring invalid pattern on field %s: %r", field.get("id"), pattern)
    return anchored


def _text_rule(field: dict[str, Any]) -> dict[str, Any]:
    rule: dict[str, Any] = {"type": "string"}
    if field.get("type") in FREE_TEXT_TYPES:
        pattern = _anchored_pattern(field)
        if pattern:
            rule["pattern"] = pattern
    return rule


def _email_rule(field: dict[str, Any]) -> dict[str, Any]:
    return {"type": "string", "format": "email"}


def _number_rule(field: dict[str, Any]) -> dict[str, Any]:
    rule: dict[str, Any] = {"type": "string", "x-number": True}
    validation = field.get("validation") or {}
    if validation.get("min") is not None:
        rule["x-minimum"] = validation["min"]
    if validation.get("max") is not None:
        rule["x-maximum"] = validation["max"]
    return rule


def _choice_rule(field: dict[str, Any]) -> dict[str, Any]:
    return {"type": "string", "enum": list(field.get("options") or [])}


def _checkbox_rule(field: dict[str, Any]) -> dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}}


RULE_BUILDERS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    "text": _text_rule,
    "textarea": _text_rule,
    "email": _email_rule,
    "number": _number_rule,
    "select": _choice_rule,
    "radio": _choice_rule,
    "checkbox": _checkbox_rule,
}


def build_rule_schema(field: dict[str, Any]) -> dict[str, Any]:
    field_type = field.get("type")
    if field_type in RULE_BUILDERS:
        schema = RULE_BUILDERS[field_type](field)
    else:
        logger.debug("Unknown field type %r on %s, treating as text", field_type, field.get("id"))
        field_type = "text"
        schema = {"type": "string"}
    if field.get("required"):
        if field_type == "checkbox":
            schema["minItems"] = 1
        else:
            schema["minLength"] = 1
    return schema


class FieldRule:
    def __init__(self, field: dict[str, Any]) -> None:
        self.field_id = field["id"]
        self.label = field.get("label") or field["id"]
        self.field_type = field.get("type") if field.get("type") in RULE_BUILDERS else "text"
        self.required = bool(field.get("required"))
        self.schema = build_rule_schema(field)
        self._validator = FieldValidator(self.schema, format_checker=format_checker)

    @property
    def empty_value(self) -> Any:
        return [] if self.field_type == "checkbox" else ""

    def _message(self, error: ValidationError) -> str:
        if error.validator == "minLength":
            return f"{self.label} is required"
        if error.validator == "minItems":
            return f"Select at least one option for {self.label}"
        return MESSAGES.get(str(error.validator), error.message)

    def check(self, value: Any) -> str | None:
        if not self.required and value == self.empty_value:
            return None
        errors = sorted(
            self._validator.iter_errors(value),
            key=lambda err: KEYWORD_PRIORITY.get(str(err.validator), 99),
        )
        if not errors:
            return None
        return self._message(errors[0])

    def __repr__(self) -> str:
        return f"FieldRule({self.field_id!r}, {self.field_type!r}, required={self.required})"


def compile_schema(config: dict[str, Any]) -> dict[str, FieldRule]:
    return {field["id"]: FieldRule(field) for field in config.get("fields") or []}


def validate_values(schema: dict[str, FieldRule], values: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    for field_id, rule in schema.items():
        message = rule.check(values.get(field_id, rule.empty_value))
        if message:
            errors[field_id] = message
    return errors


def schema_document(config: dict[str, Any]) -> dict[str, Any]:
    """The whole form as one Draft 7 object schema, for API consumers."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    field_order: list[str] = []
    for field in config.get("fields") or []:
        rule = FieldRule(field)
        field_order.append(rule.field_id)
        if rule.required:
            prop = dict(rule.schema)
            required.append(rule.field_id)
        else:
            prop = {"anyOf": [{"const": rule.empty_value}, rule.schema]}
        prop["title"] = rule.label
        prop["x-field-type"] = rule.field_type
        if field.get("placeholder"):
            prop["x-placeholder"] = field["placeholder"]
        properties[rule.field_id] = prop
    document: dict[str, Any] = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "title": config.get("title", ""),
        "properties": properties,
        "x-field-order": field_order,
    }
    if required:
        document["required"] = required
    return document
