"""
Search orchestration.

Flow:
1) Resolve the full benefits list (same logic as GET /benefits, no filters)
2) Send query + benefits to the AI webhook
3) Wrap the webhook answer
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi.encoders import jsonable_encoder

from benefits import service as benefits_service
from core import settings, webhook
from core.db import Database

from .schemas import SearchRequest

logger = logging.getLogger(__name__)


def build_webhook_payload(
    request: SearchRequest,
    benefits: list[dict[str, Any]],
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    timestamp = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    payload: dict[str, Any] = {
        "query": request.query,
        # Database rows may hold dates and decimals.
        "benefits": jsonable_encoder(benefits),
        "timestamp": timestamp,
    }
    if request.filters is not None:
        payload["filters"] = request.filters.model_dump(exclude_none=True)
    return payload


async def search(request: SearchRequest, *, database: Database) -> dict[str, Any]:
    logger.info("search_started query_chars=%s", len(request.query))

    benefits = await benefits_service.resolve_benefits(database)
    logger.info("search_benefits_loaded count=%s", len(benefits))

    ai_response = await webhook.post_json(
        settings.webhook_url(),
        build_webhook_payload(request, benefits),
        timeout_s=settings.webhook_timeout_s(),
    )
    logger.info("search_completed")

    return {
        "query": request.query,
        "totalBenefits": len(benefits),
        "aiResponse": ai_response,
    }
