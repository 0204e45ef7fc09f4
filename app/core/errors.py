# app/core/errors.py
"""
Application error taxonomy.

Every failure that leaves a request handler is one of these. The handler
registered in `app.main` turns them into:

    {"error": <message>, "details": <details>}   # details only when set

Messages and details are public: never put raw driver / storage error
text in them.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors converted into JSON error responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: str | None = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class Unauthorized(AppError):
    """Missing or invalid bearer credential. Not retryable without re-auth."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class DependencyFailure(AppError):
    """A storage round trip failed. Retryable by repeating the request."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Storage operation failed"


class InternalError(AppError):
    """Unclassified fault; details are logged server-side only."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"
