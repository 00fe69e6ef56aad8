"""
Recovery middleware: any exception escaping a route becomes a logged 500
with the INTERNAL_ERROR envelope instead of a bare server error.
"""

from __future__ import annotations

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from setlist.core.errors import InternalError
from setlist.core.logging import get_logger

logger = get_logger("setlist.recovery")


class RecoveryMiddleware(BaseHTTPMiddleware):
    """Catch unhandled exceptions and answer with a generic internal error."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "unhandled exception in request",
                extra={"method": request.method, "path": request.url.path},
            )
            error = InternalError()
            return JSONResponse(status_code=error.status_code, content=error.to_dict())
