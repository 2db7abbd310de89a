"""
Benefits API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from core import responses
from core.db import Database, get_database

from . import service

router = APIRouter()


@router.get("/benefits")
async def list_benefits(
    category: str | None = None,
    bank: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=1000),
    database: Database = Depends(get_database),
) -> JSONResponse:
    benefits = await service.resolve_benefits(database, category=category, bank=bank, limit=limit)
    return responses.success(benefits)
