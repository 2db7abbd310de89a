"""
Search API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from core import responses
from core.db import Database, get_database

from . import service
from .schemas import parse_search_request

router = APIRouter()


@router.post("/search")
async def search(
    request: Request,
    database: Database = Depends(get_database),
) -> JSONResponse:
    search_request = parse_search_request(await request.body())
    result = await service.search(search_request, database=database)
    return responses.success(result)
