"""
Spreadsheet source: benefits published as CSV.

The sheet is fetched over HTTP (publicly, or with a service-account Bearer
token) and parsed with a deliberately simple line/comma splitter:
- no quoting or escaping; a comma inside a quoted cell splits the cell
- double quotes are stripped from every header and value
- a short row gets "" for its missing trailing columns
Consumers rely on this exact behavior, so keep it as is.
"""

from __future__ import annotations

import logging

import httpx

from core import google_auth, settings
from core.errors import ConfigurationError, FetchError

logger = logging.getLogger(__name__)


def _split_line(line: str) -> list[str]:
    return [cell.strip().replace('"', "") for cell in line.split(",")]


def parse_benefits_csv(csv_text: str) -> list[dict[str, str]]:
    """
    First line is the header row; every following line becomes one record.
    """
    lines = (csv_text or "").strip().split("\n")
    headers = _split_line(lines[0])

    benefits: list[dict[str, str]] = []
    for line_no, line in enumerate(lines[1:], start=1):
        values = _split_line(line)
        benefit = {
            header: (values[i] if i < len(values) else "") or ""
            for i, header in enumerate(headers)
        }

        if benefit.get("title") and not benefit.get("name"):
            benefit["name"] = benefit["title"]
        # Only stable within one fetch: reordering the sheet renumbers rows.
        if not benefit.get("id"):
            benefit["id"] = str(line_no)

        benefits.append(benefit)
    return benefits


def has_service_account() -> bool:
    return bool(settings.service_account_email() and settings.service_account_private_key().strip())


async def fetch_benefits_from_sheet(
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict[str, str]]:
    url = settings.sheets_url()
    if not url:
        raise ConfigurationError("GOOGLE_SHEETS_URL is not set.")

    timeout_s = settings.sheets_timeout_s()
    headers: dict[str, str] = {}
    if has_service_account():
        token = await google_auth.fetch_access_token(
            email=settings.service_account_email(),
            raw_private_key=settings.service_account_private_key(),
            token_uri=settings.token_uri(),
            timeout_s=timeout_s,
            transport=transport,
        )
        headers["Authorization"] = f"Bearer {token}"

    try:
        async with httpx.AsyncClient(
            timeout=timeout_s,
            transport=transport,
            follow_redirects=True,
        ) as client:
            resp = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        logger.error("sheet_unreachable authenticated=%s error=%s", bool(headers), exc)
        raise FetchError(f"Sheet request failed: {exc}") from exc

    if not resp.is_success:
        logger.error("sheet_fetch_failed status=%s authenticated=%s", resp.status_code, bool(headers))
        raise FetchError(f"Sheet request failed with status: {resp.status_code}")

    benefits = parse_benefits_csv(resp.text)
    logger.info("sheet_fetched rows=%s authenticated=%s", len(benefits), bool(headers))
    return benefits
