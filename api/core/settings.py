"""
Environment-backed settings.

Every value is read from the process environment when asked for, so tests can
patch `os.environ` without reloading modules.
"""

from __future__ import annotations

import os

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


def _env_str(name: str) -> str:
    return os.environ.get(name, "").strip()


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# Spreadsheet source


def sheets_url() -> str:
    return _env_str("GOOGLE_SHEETS_URL")


def service_account_email() -> str:
    return _env_str("GOOGLE_SERVICE_ACCOUNT_EMAIL")


def service_account_private_key() -> str:
    # Not stripped here; key normalization owns quote/newline handling.
    return os.environ.get("GOOGLE_PRIVATE_KEY", "")


def token_uri() -> str:
    return _env_str("GOOGLE_TOKEN_URI") or DEFAULT_TOKEN_URI


def sheets_timeout_s() -> float:
    return _env_float("SHEETS_TIMEOUT_S", 30.0)


# AI webhook


def webhook_url() -> str:
    return _env_str("N8N_WEBHOOK_URL")


def webhook_timeout_s() -> float:
    return _env_float("WEBHOOK_TIMEOUT_S", 60.0)


# Database


def database_dsn() -> str:
    return _env_str("DATABASE_URL")


def db_host() -> str:
    return _env_str("DB_HOST") or "localhost"


def db_port() -> int:
    return _env_int("DB_PORT", 5432)


def db_name() -> str | None:
    return _env_str("DB_NAME") or None


def db_user() -> str | None:
    return _env_str("DB_USER") or None


def db_password() -> str | None:
    return os.environ.get("DB_PASSWORD") or None


def db_max_connections() -> int:
    return max(1, _env_int("DB_MAX_CONNECTIONS", 20))


def db_idle_timeout_s() -> float:
    # Configured in milliseconds.
    return _env_int("DB_IDLE_TIMEOUT", 30000) / 1000.0


def db_connection_timeout_s() -> float:
    # Configured in milliseconds.
    return _env_int("DB_CONNECTION_TIMEOUT", 2000) / 1000.0


def db_ssl_enabled() -> bool:
    return _env_str("DB_SSL").lower() not in {"disable", "false", "0", "off"}


# HTTP surface


def cors_allow_origins() -> list[str]:
    raw = _env_str("CORS_ALLOW_ORIGINS") or "*"
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
