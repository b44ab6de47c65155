from __future__ import annotations

from fastapi import Request


def public_base_url(request: Request) -> str:
    settings = request.app.state.settings
    return settings.base_url or str(request.base_url).rstrip("/")
