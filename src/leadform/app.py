from __future__ import annotations

import functools
import json
from typing import Any

import httpx
import markupsafe
from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from leadform.config import BASE_DIR, FIELD_TYPES, Settings
from leadform.routes.api import router as api_router
from leadform.routes.builder import router as builder_router
from leadform.routes.embed import router as embed_router
from leadform.store import FormStore, init_storage, seed_default
from leadform.webhook import send_webhook


def _tojson_attr(value: Any) -> markupsafe.Markup:
    """Escape a JSON string so it can sit inside an HTML attribute."""
    return markupsafe.Markup(markupsafe.escape(json.dumps(value, ensure_ascii=False)))


def field_input_type(field: dict[str, Any]) -> str:
    field_type = field.get("type")
    if field_type == "email":
        return "email"
    if field_type == "number":
        return "number"
    return "text"


def create_app(
    settings: Settings | None = None,
    store: FormStore | None = None,
    webhook_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or Settings()
    storage = store if store is not None else init_storage(settings)
    seed_default(storage)

    app = FastAPI(
        openapi_tags=[
            {"name": "builder", "description": "Form builder (HTML)"},
            {"name": "embed", "description": "Embeddable forms (HTML)"},
            {"name": "api/forms", "description": "REST API: form configurations"},
            {"name": "api/submissions", "description": "REST API: submissions"},
            {"name": "system", "description": "System"},
        ]
    )

    app.state.storage = storage
    app.state.settings = settings
    app.state.webhook_sender = functools.partial(
        send_webhook,
        timeout=settings.webhook_timeout,
        transport=webhook_transport,
    )

    templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
    app.state.templates = templates

    templates.env.filters["tojson_attr"] = _tojson_attr
    templates.env.globals["field_input_type"] = field_input_type
    templates.env.globals["field_types"] = FIELD_TYPES

    app.include_router(builder_router)
    app.include_router(embed_router)
    app.include_router(api_router)

    return app
