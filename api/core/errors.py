"""
Service error taxonomy.

Each error carries the HTTP status and the message that is safe to show to a
client. The exception text itself is for logs only.
"""

from __future__ import annotations

GENERIC_MESSAGE = "Internal server error"


class ServiceError(RuntimeError):
    status_code = 500
    public_message = GENERIC_MESSAGE
    details: str | None = None


class MethodNotAllowed(ServiceError):
    status_code = 405
    public_message = "Method not allowed"


class BadRequest(ServiceError):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.public_message = message


class ConfigurationError(ServiceError):
    pass


class AuthError(ServiceError):
    pass


class FetchError(ServiceError):
    pass


class SourceUnavailable(ServiceError):
    details = "No benefits source available"


class InternalError(ServiceError):
    pass
