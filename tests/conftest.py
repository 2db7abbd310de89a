"""Test configuration and fixtures."""
import os
from typing import Any
from unittest.mock import patch

import pytest

MANAGED_ENV_VARS = (
    'GOOGLE_SHEETS_URL',
    'GOOGLE_SERVICE_ACCOUNT_EMAIL',
    'GOOGLE_PRIVATE_KEY',
    'GOOGLE_TOKEN_URI',
    'N8N_WEBHOOK_URL',
    'DATABASE_URL',
    'DB_HOST',
    'DB_PORT',
    'DB_NAME',
    'DB_USER',
    'DB_PASSWORD',
    'DB_MAX_CONNECTIONS',
    'DB_IDLE_TIMEOUT',
    'DB_CONNECTION_TIMEOUT',
    'DB_SSL',
)

SHEET_URL = 'https://sheets.example.test/export?format=csv'
WEBHOOK_URL = 'https://workflow.example.test/webhook/benefits'


class FakeDatabase:
    """In-memory stand-in for core.db.Database."""

    def __init__(self, rows=None, reachable=True, query_error=None):
        self.rows = rows if rows is not None else []
        self.reachable = reachable
        self.query_error = query_error
        self.queries: list[tuple[str, tuple[Any, ...]]] = []
        self.closed = False

    async def check_connection(self) -> bool:
        return self.reachable

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self.queries.append((sql, args))
        if self.query_error is not None:
            raise self.query_error
        return list(self.rows)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def clean_env():
    """Start every test with no service configuration in the environment."""
    with patch.dict(os.environ, {}, clear=False):
        for name in MANAGED_ENV_VARS:
            os.environ.pop(name, None)
        yield


@pytest.fixture
def sheet_env():
    """Configure an unauthenticated spreadsheet source."""
    with patch.dict(os.environ, {'GOOGLE_SHEETS_URL': SHEET_URL}):
        yield SHEET_URL


@pytest.fixture
def webhook_env():
    with patch.dict(os.environ, {'N8N_WEBHOOK_URL': WEBHOOK_URL}):
        yield WEBHOOK_URL


@pytest.fixture
def db_rows():
    return [
        {'id': 1, 'name': 'Dental plan', 'category': 'Health', 'bank': 'Acme'},
        {'id': 2, 'name': 'Gym discount', 'category': 'Wellness', 'bank': 'Acme'},
    ]


@pytest.fixture
def fake_db(db_rows):
    return FakeDatabase(rows=db_rows)


@pytest.fixture(scope='session')
def rsa_private_key_pem():
    """A throwaway RSA key in PEM form, for signing assertions."""
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode('utf-8')
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode('utf-8')
    return pem, public_pem


@pytest.fixture
def make_db():
    """Factory for FakeDatabase instances with custom behavior."""
    return FakeDatabase
