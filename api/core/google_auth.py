"""
Service-account access tokens via the OAuth2 JWT-bearer grant.

Flow:
1) Sign an assertion (RS256) with the service account's private key
2) POST it to the token endpoint
3) Use the returned access token as a Bearer header
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import jwt

from .errors import AuthError, ConfigurationError

logger = logging.getLogger(__name__)

SHEETS_READONLY_SCOPE = "https://www.googleapis.com/auth/spreadsheets.readonly"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_S = 3600


def normalize_private_key(raw_key: str) -> str:
    """
    Turn an env-provided key into PEM text.

    Keys pasted into dashboards often arrive wrapped in quotes and with the
    newlines escaped as a literal backslash-n.
    """
    key = (raw_key or "").strip()
    if len(key) >= 2 and key[0] == key[-1] and key[0] in {'"', "'"}:
        key = key[1:-1].strip()
    key = key.replace("\\r\\n", "\n").replace("\\n", "\n")

    if "-----BEGIN" not in key or "-----END" not in key:
        raise ConfigurationError("Service account private key is not a PEM block.")
    return key + "\n" if not key.endswith("\n") else key


def build_assertion(
    *,
    email: str,
    private_key: str,
    token_uri: str,
    scope: str = SHEETS_READONLY_SCOPE,
    now: int | None = None,
) -> str:
    issued_at = int(time.time()) if now is None else now
    payload = {
        "iss": email,
        "scope": scope,
        "aud": token_uri,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_LIFETIME_S,
    }
    try:
        return jwt.encode(payload, private_key, algorithm="RS256")
    except (ValueError, TypeError, jwt.PyJWTError) as exc:
        raise AuthError("Could not sign the service account assertion.") from exc


async def fetch_access_token(
    *,
    email: str,
    raw_private_key: str,
    token_uri: str,
    timeout_s: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """
    Exchange a signed assertion for a short-lived access token.
    """
    private_key = normalize_private_key(raw_private_key)
    assertion = build_assertion(email=email, private_key=private_key, token_uri=token_uri)

    try:
        async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
            resp = await client.post(
                token_uri,
                data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            )
    except httpx.HTTPError as exc:
        logger.error("token_exchange_unreachable token_uri=%s error=%s", token_uri, exc)
        raise AuthError(f"Token endpoint unreachable: {exc}") from exc

    if not resp.is_success:
        # Avoid dumping huge bodies; include a small snippet.
        body = resp.text[:500]
        logger.error("token_exchange_failed status=%s body=%s", resp.status_code, body)
        raise AuthError(f"Token exchange failed: {resp.status_code} {body}")

    try:
        data: dict[str, Any] = resp.json()
    except ValueError as exc:
        raise AuthError("Token endpoint returned a non-JSON body.") from exc

    token = data.get("access_token") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token:
        raise AuthError("Token endpoint returned no access_token.")
    return token
