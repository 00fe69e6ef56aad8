"""
API error taxonomy.

Every failure a handler reports to a client is one of the APIError subclasses
below. The FastAPI exception handler in setlist.api.main renders them into the
error envelope: {"error": {"code", "message", "details"?}}.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, Optional

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

from setlist.core.logging import get_logger

logger = get_logger("setlist.errors")


class ErrorCode(str, Enum):
    """Error codes surfaced in the error envelope."""

    VALIDATION = "VALIDATION_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    MISSING_PARAMETER = "MISSING_PARAMETER"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL = "INTERNAL_ERROR"


class APIError(Exception):
    """Base error with a code, an HTTP status and a user-safe message."""

    code: ErrorCode = ErrorCode.INTERNAL
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class MissingParameter(APIError):
    """A required query parameter was not supplied."""

    code = ErrorCode.MISSING_PARAMETER
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, param: str) -> None:
        super().__init__(f"Required parameter missing: {param}", {"parameter": param})
        self.param = param


class InvalidParameter(APIError):
    """A parameter was supplied but is malformed or out of range."""

    code = ErrorCode.INVALID_PARAMETER
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, param: str, message: str) -> None:
        super().__init__(message, {"parameter": param})
        self.param = param


class ValidationFailed(APIError):
    """The request body violates a business rule."""

    code = ErrorCode.VALIDATION
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(APIError):
    """A referenced entity does not exist."""

    code = ErrorCode.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class InternalError(APIError):
    """Persistence or unexpected failure. Never carries internal details."""

    def __init__(self) -> None:
        super().__init__("An unexpected error occurred")


# PUBLIC_INTERFACE
@contextmanager
def persistence_errors(operation: str, **context: Any) -> Iterator[None]:
    """Log a failed query with context and re-raise it as InternalError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"failed to {operation}", extra={**context, "error": str(exc)})
        raise InternalError() from exc
