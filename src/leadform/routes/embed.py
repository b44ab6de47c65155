from __future__ import annotations

import copy
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from leadform.config import DYNAMIC_FORM_PATH
from leadform.forms import PRESET_FORMS
from leadform.renderer import FormSession, collect_form_values, initial_values
from leadform.store import MALFORMED, resolve_form_config

router = APIRouter()


def _render_form(
    request: Request,
    config: dict[str, Any],
    values: dict[str, Any] | None = None,
    errors: dict[str, str] | None = None,
    malformed: bool = False,
) -> HTMLResponse:
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "form_embed.html",
        {
            "form": config,
            "fields": config.get("fields") or [],
            "values": values if values is not None else initial_values(config),
            "errors": errors or {},
            "malformed": malformed,
            "action": str(request.url),
        },
    )


async def _submit(request: Request, config: dict[str, Any]) -> HTMLResponse:
    templates = request.app.state.templates
    session = FormSession(config, sender=request.app.state.webhook_sender)
    form_data = await request.form()
    if await session.submit(collect_form_values(config, form_data)):
        return templates.TemplateResponse(
            request,
            "form_success.html",
            {"form": config, "message": session.success_message},
        )
    return _render_form(request, config, values=session.values, errors=session.errors)


def _preset(slug: str) -> dict[str, Any]:
    config = PRESET_FORMS.get(slug)
    if config is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return copy.deepcopy(config)


@router.get(DYNAMIC_FORM_PATH, response_class=HTMLResponse, tags=["embed"])
async def dynamic_form(request: Request, id: str | None = None) -> HTMLResponse:
    resolution = resolve_form_config(request.app.state.storage, id)
    return _render_form(request, resolution.config, malformed=resolution.status == MALFORMED)


@router.post(DYNAMIC_FORM_PATH, response_class=HTMLResponse, tags=["embed"])
async def submit_dynamic_form(request: Request, id: str | None = None) -> HTMLResponse:
    resolution = resolve_form_config(request.app.state.storage, id)
    return await _submit(request, resolution.config)


@router.get("/embed/{slug}", response_class=HTMLResponse, tags=["embed"])
async def preset_form(request: Request, slug: str) -> HTMLResponse:
    return _render_form(request, _preset(slug))


@router.post("/embed/{slug}", response_class=HTMLResponse, tags=["embed"])
async def submit_preset_form(request: Request, slug: str) -> HTMLResponse:
    return await _submit(request, _preset(slug))
