"""
Search request parsing.

The body is parsed by hand instead of as a FastAPI body model so that an
empty body, broken JSON and a bad `query` each get their own 400 message.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from core.errors import BadRequest

MISSING_BODY = "Request body is required"
INVALID_JSON = "Invalid JSON in request body"
INVALID_QUERY = "Query parameter is required and must be a non-empty string"
INVALID_FILTERS = "Filters must be an object with string values"


class SearchFilters(BaseModel):
    model_config = ConfigDict(extra="allow")

    category: str | None = None


class SearchRequest(BaseModel):
    query: str
    filters: SearchFilters | None = None


def parse_search_request(raw_body: bytes) -> SearchRequest:
    if not raw_body or not raw_body.strip():
        raise BadRequest(MISSING_BODY)

    try:
        data: Any = json.loads(raw_body)
    except ValueError as exc:
        raise BadRequest(INVALID_JSON) from exc
    if not isinstance(data, dict):
        raise BadRequest(INVALID_JSON)

    query = data.get("query")
    if not isinstance(query, str) or not query.strip():
        raise BadRequest(INVALID_QUERY)

    filters = data.get("filters")
    try:
        return SearchRequest(
            query=query,
            filters=SearchFilters.model_validate(filters) if filters is not None else None,
        )
    except ValidationError as exc:
        raise BadRequest(INVALID_FILTERS) from exc
