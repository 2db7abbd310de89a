"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. The app builds one instance at process
start (see `api/main.py`), hands it to routes through `get_database`, and
closes it on shutdown. The pool itself is created lazily on first use so a
serverless container that never touches the database never opens a socket.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request

from . import settings

logger = logging.getLogger(__name__)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _relaxed_ssl_context() -> ssl.SSLContext:
    # Managed Postgres (RDS and friends) presents certs we do not pin.
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def pool_options() -> dict[str, Any]:
    """
    Keyword arguments for `asyncpg.create_pool`, built from settings.
    """
    options: dict[str, Any] = {
        "min_size": 0,
        "max_size": settings.db_max_connections(),
        "max_inactive_connection_lifetime": settings.db_idle_timeout_s(),
        "timeout": settings.db_connection_timeout_s(),
        "ssl": _relaxed_ssl_context() if settings.db_ssl_enabled() else False,
    }

    dsn = settings.database_dsn()
    if dsn:
        options["dsn"] = _sanitize_database_url(dsn)
    else:
        options.update(
            host=settings.db_host(),
            port=settings.db_port(),
            database=settings.db_name(),
            user=settings.db_user(),
            password=settings.db_password(),
        )
    return options


def _log_termination(connection: asyncpg.Connection) -> None:
    logger.error("db_connection_terminated pid=%s", connection.get_server_pid())


async def _on_connect(connection: asyncpg.Connection) -> None:
    # Faults on idle pooled connections surface here, never to the request path.
    connection.add_termination_listener(_log_termination)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(self, options: dict[str, Any] | None = None) -> None:
        self._options = options
        self._pool: asyncpg.Pool | None = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    async def pool(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool
        async with self._lock:
            if self._pool is None:
                options = self._options if self._options is not None else pool_options()
                self._pool = await asyncpg.create_pool(init=_on_connect, **options)
                logger.info("db_pool_created max_size=%s", options.get("max_size"))
        return self._pool

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    async def check_connection(self) -> bool:
        """
        Acquire and release one connection. Never raises.
        """
        try:
            pool = await self.pool()
            async with pool.acquire():
                pass
        except Exception:
            logger.exception("db_connection_check_failed")
            return False
        return True

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        try:
            pool = await self.pool()
            rows = await pool.fetch(sql, *args)
        except Exception:
            logger.exception("db_query_failed sql=%s", " ".join(sql.split()))
            raise
        return [_record_to_dict(r) for r in rows]


def get_database(request: Request) -> Database:
    return request.app.state.database
