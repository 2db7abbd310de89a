"""
Benefits listing (source selection).

Order of attempts:
1) Spreadsheet, when GOOGLE_SHEETS_URL is configured. Filters are applied here,
   case-insensitively.
2) Database, when the sheet is not configured or failed for any reason.
   Filters are applied in SQL as exact matches.

The two paths do not agree on filter case sensitivity. That mismatch is
long-standing behavior and is kept until product decides otherwise.
"""

from __future__ import annotations

import logging
from typing import Any

from core import settings
from core.db import Database
from core.errors import SourceUnavailable

from . import repository, sheets

logger = logging.getLogger(__name__)


def _matches(value: Any, wanted: str) -> bool:
    return bool(value) and str(value).lower() == wanted.lower()


def filter_sheet_benefits(
    benefits: list[dict[str, str]],
    *,
    category: str | None = None,
    bank: str | None = None,
    limit: int | None = None,
) -> list[dict[str, str]]:
    if category:
        benefits = [b for b in benefits if _matches(b.get("category"), category)]
    if bank:
        benefits = [b for b in benefits if _matches(b.get("bank"), bank)]
    if limit is not None:
        benefits = benefits[:limit]
    return benefits


async def _from_database(
    database: Database,
    *,
    category: str | None,
    bank: str | None,
    limit: int | None,
) -> list[dict[str, Any]]:
    if not await database.check_connection():
        raise SourceUnavailable("Database unreachable and no spreadsheet data available.")

    try:
        rows = await repository.list_benefits(database, category=category, bank=bank, limit=limit)
    except Exception as exc:
        raise SourceUnavailable("Benefits query failed.") from exc

    logger.info("benefits_resolved source=database count=%s", len(rows))
    return rows


async def resolve_benefits(
    database: Database,
    *,
    category: str | None = None,
    bank: str | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """
    Return the benefits list from the first source that works.

    Raises SourceUnavailable when both sources are exhausted; nothing partial
    is returned.
    """
    # Blank means no filter; anything else is matched as given.
    category = category if category and category.strip() else None
    bank = bank if bank and bank.strip() else None

    if settings.sheets_url():
        try:
            benefits = await sheets.fetch_benefits_from_sheet()
        except Exception:
            logger.exception("sheet_source_failed falling_back=database")
        else:
            benefits = filter_sheet_benefits(benefits, category=category, bank=bank, limit=limit)
            logger.info("benefits_resolved source=sheet count=%s", len(benefits))
            return benefits

    return await _from_database(database, category=category, bank=bank, limit=limit)
