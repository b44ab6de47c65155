"""Field definition and form configuration model tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from leadform.errors import FieldNotFoundError, InvalidFormError, MalformedConfigError
from leadform.fields import check_fields, coerce_value, initial_value, new_field, normalize_field
from leadform.forms import (
    DEFAULT_FORM_CONFIG,
    PRESET_FORMS,
    FormBuilder,
    new_form_config,
    parse_form_config,
    stamp_for_save,
)
from leadform.schema import compile_schema


def test_new_field_defaults() -> None:
    field = new_field("radio", existing_ids=["f_1"])
    assert field["id"].startswith("f_")
    assert field["label"] == "New radio field"
    assert field["required"] is False
    assert field["options"] == ["Option 1", "Option 2"]
    assert new_field("text")["options"] == []


def test_new_field_rejects_unknown_type() -> None:
    with pytest.raises(ValueError):
        new_field("signature")


def test_normalize_field_cleans_raw_input() -> None:
    field = normalize_field(
        {
            "id": " f_a ",
            "type": "number",
            "label": "  Area ",
            "required": "on",
            "options": "A\n\n B \n",
            "validation": {"min": "5", "max": "", "pattern": "  "},
        }
    )
    assert field == {
        "id": "f_a",
        "type": "number",
        "label": "Area",
        "placeholder": "",
        "required": True,
        "options": ["A", "B"],
        "validation": {"min": 5},
    }


def test_check_fields_reports_problems() -> None:
    fields = [
        normalize_field({"id": "a", "type": "text", "label": ""}),
        normalize_field({"id": "a", "type": "select", "label": "Pick"}),
        normalize_field({"id": "b", "type": "text", "label": "Code", "validation": {"pattern": "("}}),
    ]
    problems = check_fields(fields)
    assert problems == [
        "Field 1: label is required",
        "Field 2: duplicate id (a)",
        "Field 2: add at least one option",
        "Field 3: pattern is not a valid regular expression",
    ]
    assert check_fields([]) == ["At least one field is required"]


def test_check_fields_rejects_pattern_that_cannot_be_anchored() -> None:
    field = normalize_field({"id": "code", "type": "text", "label": "Code", "validation": {"pattern": "(?i)abc"}})
    assert check_fields([field]) == ["Field 1: pattern is not a valid regular expression"]


def test_initial_and_coerced_values() -> None:
    checkbox = normalize_field({"id": "c", "type": "checkbox", "label": "C", "options": ["x"]})
    number = normalize_field({"id": "n", "type": "number", "label": "N"})
    assert initial_value(checkbox) == []
    assert initial_value(number) == ""
    assert coerce_value(checkbox, None) == []
    assert coerce_value(checkbox, "x") == ["x"]
    assert coerce_value(checkbox, ("x", "y")) == ["x", "y"]
    assert coerce_value(number, 12) == "12"
    assert coerce_value(number, None) == ""
    assert coerce_value(number, True) is True


def test_new_form_config_has_default_fields() -> None:
    config = new_form_config()
    assert [field["type"] for field in config["fields"]] == ["text", "select", "number"]
    assert len({field["id"] for field in config["fields"]}) == 3
    assert config["created_at"] is None
    assert new_form_config()["id"] != config["id"]


def test_builder_add_update_remove_by_id() -> None:
    builder = FormBuilder(new_form_config())
    added = builder.add_field("email")
    builder.update_field(added["id"], label="Email", required=True, id="hijack")
    assert builder.fields[-1]["id"] == added["id"]
    assert builder.fields[-1]["label"] == "Email"
    assert builder.fields[-1]["required"] is True

    builder.move_field(added["id"], -10)
    assert builder.fields[0]["id"] == added["id"]

    builder.remove_field(added["id"])
    assert added["id"] not in [field["id"] for field in builder.fields]

    with pytest.raises(FieldNotFoundError):
        builder.remove_field(added["id"])
    with pytest.raises(KeyError):
        builder.update_field("missing", label="x")


def test_builder_settings_are_normalized() -> None:
    builder = FormBuilder(new_form_config())
    builder.update_settings(title=" Quote ", border_radius="-4", unknown="ignored")
    assert builder.config["title"] == "Quote"
    assert builder.config["border_radius"] == 0
    assert "unknown" not in builder.config


def test_builder_save_rejects_invalid_form(store) -> None:
    builder = FormBuilder(new_form_config())
    builder.update_settings(webhook_url="ftp://example.com")
    builder.update_field(builder.fields[0]["id"], label="")
    with pytest.raises(InvalidFormError) as excinfo:
        builder.save(store)
    assert len(excinfo.value.problems) == 2
    assert store.list_forms() == []


def test_builder_save_persists_snapshot(store) -> None:
    builder = FormBuilder(new_form_config())
    builder.add_field("checkbox")
    assert store.list_forms() == []
    form_id = builder.save(store)
    saved = store.load(form_id)
    assert saved is not None
    assert len(saved["fields"]) == 4
    assert builder.config == saved


def test_stamp_for_save_fixes_created_at() -> None:
    first = datetime(2025, 1, 1, tzinfo=timezone.utc)
    second = datetime(2025, 2, 1, tzinfo=timezone.utc)
    stamped = stamp_for_save(new_form_config(), now=first)
    assert stamped["created_at"] == stamped["updated_at"] == first.isoformat()
    restamped = stamp_for_save(stamped, existing=stamped, now=second)
    assert restamped["created_at"] == first.isoformat()
    assert restamped["updated_at"] == second.isoformat()


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "not a config",
        {"fields": []},
        {"id": "x", "fields": "nope"},
        {"id": "x", "fields": [{"type": "text"}]},
        {"id": "x", "fields": ["text"]},
    ],
)
def test_parse_form_config_rejects_malformed(raw) -> None:
    with pytest.raises(MalformedConfigError):
        parse_form_config(raw)


def test_parse_form_config_fills_missing_display_keys() -> None:
    config = parse_form_config({"id": "x", "fields": [{"id": "a", "type": "text", "label": "A"}]})
    assert config["submit_button_text"] == "Estimate Value"
    assert config["border_radius"] == 8
    assert config["fields"][0]["validation"] == {}


def test_builtin_configs_compile() -> None:
    for config in (DEFAULT_FORM_CONFIG, *PRESET_FORMS.values()):
        assert check_fields(config["fields"]) == []
        assert set(compile_schema(config)) == {field["id"] for field in config["fields"]}


def test_phone_lead_pattern() -> None:
    rule = compile_schema(PRESET_FORMS["phone-lead"])["phone"]
    assert rule.check("+92 300 1234567") is None
    assert rule.check("12345") == "Invalid format"
    assert rule.check("call me") == "Invalid format"
