"""
Uniform JSON responses.

Every response, success or error, carries the same CORS headers so browser
clients can read error bodies too.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import GENERIC_MESSAGE, InternalError, MethodNotAllowed, ServiceError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}


def success(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        content=jsonable_encoder(data),
        status_code=status_code,
        headers=dict(DEFAULT_HEADERS),
    )


def error(message: str, status_code: int = 500, details: str | None = None) -> JSONResponse:
    body: dict[str, Any] = {"error": message}
    if details:
        body["details"] = details
    return JSONResponse(content=body, status_code=status_code, headers=dict(DEFAULT_HEADERS))


def _service_error_response(exc: ServiceError) -> JSONResponse:
    return error(exc.public_message, exc.status_code, exc.details)


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed method=%s path=%s error=%s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc,
        )
    return _service_error_response(exc)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        response = _service_error_response(
            MethodNotAllowed(f"{request.method} not allowed on {request.url.path}")
        )
    else:
        message = "Not found" if exc.status_code == 404 else str(exc.detail or GENERIC_MESSAGE)
        response = error(message, exc.status_code)
    if exc.headers:
        # Keeps `Allow` on 405 responses.
        response.headers.update(exc.headers)
    return response


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = ", ".join(".".join(str(p) for p in err.get("loc", ())) for err in exc.errors())
    return error("Invalid request parameters", 400, fields or None)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_crashed method=%s path=%s", request.method, request.url.path)
    return _service_error_response(InternalError(f"Unhandled {type(exc).__name__}"))


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
