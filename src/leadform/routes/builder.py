from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from leadform.config import DYNAMIC_FORM_PATH
from leadform.embed import embed_codes
from leadform.errors import FieldNotFoundError, InvalidFormError, MalformedConfigError
from leadform.forms import PRESET_FORMS, SETTING_KEYS, FormBuilder, parse_form_config
from leadform.routes import public_base_url
from leadform.utils import loads_json

router = APIRouter()

FIELD_INPUTS = ("label", "placeholder", "options", "min", "max", "pattern")


def _render_builder(
    request: Request,
    builder: FormBuilder,
    errors: list[str] | None = None,
    saved: bool = False,
    persisted: bool = False,
) -> HTMLResponse:
    templates = request.app.state.templates
    config = builder.config
    embed = (
        embed_codes(public_base_url(request), DYNAMIC_FORM_PATH, config["id"])
        if persisted
        else None
    )
    return templates.TemplateResponse(
        request,
        "builder.html",
        {
            "form": config,
            "fields": config["fields"],
            "errors": errors or [],
            "saved": saved,
            "embed": embed,
        },
        status_code=400 if errors else 200,
    )


def apply_form_edits(builder: FormBuilder, form_data: Any) -> None:
    """Copy the settings and per-field inputs of a builder post into the draft."""
    builder.update_settings(**{key: form_data.get(key) for key in SETTING_KEYS if key in form_data})
    for field in list(builder.fields):
        prefix = f"{field['id']}__"
        if f"{prefix}label" not in form_data:
            continue
        values = {name: form_data.get(f"{prefix}{name}", "") for name in FIELD_INPUTS}
        builder.update_field(
            field["id"],
            label=values["label"],
            placeholder=values["placeholder"],
            required=bool(form_data.get(f"{prefix}required")),
            options=values["options"],
            validation={"min": values["min"], "max": values["max"], "pattern": values["pattern"]},
        )


@router.get("/", response_class=HTMLResponse, tags=["builder"])
async def home(request: Request) -> RedirectResponse:
    return RedirectResponse("/builder")


@router.get("/builder", response_class=HTMLResponse, tags=["builder"])
async def list_forms(request: Request) -> HTMLResponse:
    storage = request.app.state.storage
    templates = request.app.state.templates
    base_url = public_base_url(request)
    presets = [
        {"slug": slug, "title": config["title"], "embed": embed_codes(base_url, f"/embed/{slug}")}
        for slug, config in PRESET_FORMS.items()
    ]
    return templates.TemplateResponse(
        request,
        "builder_list.html",
        {"forms": storage.list_forms(), "presets": presets},
    )


@router.get("/builder/new", response_class=HTMLResponse, tags=["builder"])
async def new_form(request: Request) -> HTMLResponse:
    return _render_builder(request, FormBuilder())


@router.get("/builder/{form_id}", response_class=HTMLResponse, tags=["builder"])
async def edit_form(request: Request, form_id: str, saved: bool = False) -> HTMLResponse:
    storage = request.app.state.storage
    try:
        form = storage.load(form_id)
    except MalformedConfigError:
        raise HTTPException(status_code=409, detail="Stored configuration is malformed")
    if form is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return _render_builder(request, FormBuilder(form), saved=saved, persisted=True)


@router.post("/builder", response_class=HTMLResponse, tags=["builder"])
async def update_draft(request: Request) -> HTMLResponse:
    storage = request.app.state.storage
    form_data = await request.form()
    try:
        builder = FormBuilder(parse_form_config(loads_json(str(form_data.get("draft_json", "")))))
    except (MalformedConfigError, ValueError):
        raise HTTPException(status_code=400, detail="Draft is malformed")

    action, _, argument = str(form_data.get("action", "")).partition(":")
    try:
        apply_form_edits(builder, form_data)
        if action == "add_field":
            builder.add_field(argument)
        elif action == "remove_field":
            builder.remove_field(argument)
        elif action == "move_up":
            builder.move_field(argument, -1)
        elif action == "move_down":
            builder.move_field(argument, 1)
        elif action == "save":
            form_id = builder.save(storage)
            return RedirectResponse(f"/builder/{form_id}?saved=1", status_code=303)
    except InvalidFormError as exc:
        return _render_builder(request, builder, errors=exc.problems)
    except (FieldNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return _render_builder(request, builder)
