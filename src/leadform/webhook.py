from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlsplit

import httpx

logger = logging.getLogger(__name__)


def is_valid_webhook_url(url: str) -> bool:
    if not url:
        return False
    parsed = urlsplit(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


async def send_webhook(
    url: str,
    payload: dict[str, Any],
    *,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """POST one submission payload. Failures are logged and never raised."""
    if not is_valid_webhook_url(url):
        logger.warning("Webhook skipped, invalid URL: %s", url)
        return False

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(url, json=payload)
        logger.info(
            "Webhook sent: %s -> %s (%s)",
            payload.get("formId"),
            url,
            response.status_code,
        )
        return True
    except Exception:
        logger.exception("Webhook failed: %s -> %s", payload.get("formId"), url)
        return False
