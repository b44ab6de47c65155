from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from leadform.config import DYNAMIC_FORM_PATH
from leadform.embed import embed_codes
from leadform.errors import InvalidFormError, MalformedConfigError
from leadform.forms import FormBuilder, parse_form_config
from leadform.renderer import FormSession
from leadform.routes import public_base_url
from leadform.schema import schema_document
from leadform.store import resolve_form_config
from leadform.utils import new_ulid

router = APIRouter()


def _load_or_404(request: Request, form_id: str) -> dict[str, Any]:
    storage = request.app.state.storage
    try:
        form = storage.load(form_id)
    except MalformedConfigError:
        raise HTTPException(status_code=409, detail="Stored configuration is malformed")
    if form is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


def _builder_from_payload(payload: Any, form_id: str) -> FormBuilder:
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be an object")
    try:
        config = parse_form_config({**payload, "id": form_id})
    except MalformedConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return FormBuilder(config)


def _save(request: Request, builder: FormBuilder) -> dict[str, Any]:
    try:
        builder.save(request.app.state.storage)
    except InvalidFormError as exc:
        raise HTTPException(status_code=400, detail=exc.problems)
    return builder.config


@router.get("/healthz", tags=["system"])
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/forms", tags=["api/forms"])
async def api_list_forms(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    return JSONResponse(storage.list_forms())


@router.post("/api/forms", tags=["api/forms"])
async def api_create_form(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    payload = await request.json()
    form_id = str(payload.get("id") or "") if isinstance(payload, dict) else ""
    if form_id:
        try:
            exists = storage.load(form_id) is not None
        except MalformedConfigError:
            exists = True
        if exists:
            raise HTTPException(status_code=409, detail="Form already exists")
    builder = _builder_from_payload(payload, form_id or new_ulid())
    builder.config["created_at"] = None
    return JSONResponse(_save(request, builder), status_code=201)


@router.get("/api/forms/{form_id}", tags=["api/forms"])
async def api_get_form(request: Request, form_id: str) -> JSONResponse:
    return JSONResponse(_load_or_404(request, form_id))


@router.put("/api/forms/{form_id}", tags=["api/forms"])
async def api_update_form(request: Request, form_id: str) -> JSONResponse:
    _load_or_404(request, form_id)
    payload = await request.json()
    builder = _builder_from_payload(payload, form_id)
    return JSONResponse(_save(request, builder))


@router.delete("/api/forms/{form_id}", tags=["api/forms"])
async def api_delete_form(request: Request, form_id: str) -> JSONResponse:
    storage = request.app.state.storage
    _load_or_404(request, form_id)
    storage.delete(form_id)
    return JSONResponse({"id": form_id, "deleted": True})


@router.get("/api/forms/{form_id}/schema", tags=["api/forms"])
async def api_form_schema(request: Request, form_id: str) -> JSONResponse:
    return JSONResponse(schema_document(_load_or_404(request, form_id)))


@router.get("/api/forms/{form_id}/embed", tags=["api/forms"])
async def api_form_embed(request: Request, form_id: str) -> JSONResponse:
    form = _load_or_404(request, form_id)
    return JSONResponse(embed_codes(public_base_url(request), DYNAMIC_FORM_PATH, form["id"]))


@router.post("/api/forms/{form_id}/submissions", tags=["api/submissions"])
async def api_submit_form(request: Request, form_id: str) -> JSONResponse:
    resolution = resolve_form_config(request.app.state.storage, form_id)
    payload = await request.json()
    data = payload.get("data", payload) if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="data must be an object")

    session = FormSession(resolution.config, sender=request.app.state.webhook_sender)
    if not await session.submit(data):
        return JSONResponse({"errors": session.errors}, status_code=422)
    return JSONResponse(
        {
            "status": session.state.value,
            "form_id": resolution.config["id"],
            "success_message": session.success_message,
        }
    )
