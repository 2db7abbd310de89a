"""
AI workflow webhook client.

The webhook (an n8n workflow) takes one JSON document and answers with JSON.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import ConfigurationError, FetchError

logger = logging.getLogger(__name__)


async def post_json(
    url: str,
    payload: dict[str, Any],
    *,
    timeout_s: float = 60.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    url = (url or "").strip()
    if not url:
        raise ConfigurationError("N8N_WEBHOOK_URL is not set.")

    try:
        async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
            resp = await client.post(url, json=payload)
    except httpx.HTTPError as exc:
        logger.error("webhook_unreachable error=%s", exc)
        raise FetchError(f"Webhook request failed: {exc}") from exc

    if not resp.is_success:
        body = resp.text[:500]
        logger.error("webhook_failed status=%s body=%s", resp.status_code, body)
        raise FetchError(f"Webhook request failed with status: {resp.status_code}")

    try:
        return resp.json()
    except ValueError as exc:
        logger.error("webhook_non_json_body status=%s", resp.status_code)
        raise FetchError("Webhook returned a non-JSON body.") from exc
