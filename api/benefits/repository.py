"""
Benefits SQL (raw).

Filters are exact matches done by Postgres (collation-dependent), and every
value is bound as a parameter.
"""

from __future__ import annotations

from typing import Any

from core.db import Database


def build_list_query(
    *,
    category: str | None = None,
    bank: str | None = None,
    limit: int | None = None,
) -> tuple[str, list[Any]]:
    sql = "SELECT * FROM benefits"
    args: list[Any] = []
    conditions: list[str] = []

    if category:
        args.append(category)
        conditions.append(f"category = ${len(args)}")
    if bank:
        args.append(bank)
        conditions.append(f"bank = ${len(args)}")

    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY id"

    if limit is not None:
        args.append(int(limit))
        sql += f" LIMIT ${len(args)}"
    return sql, args


async def list_benefits(
    database: Database,
    *,
    category: str | None = None,
    bank: str | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    sql, args = build_list_query(category=category, bank=bank, limit=limit)
    return await database.fetch_all(sql, *args)
