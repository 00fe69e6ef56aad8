"""
Request body size limit, taken from Settings.MAX_BODY_MB.

A declared Content-Length above the limit is answered with 413 straight away.
Bodies without one (chunked uploads) are read ahead and counted; once more
than the limit has arrived the request is answered with 413 and never reaches
a route. Both cases carry a VALIDATION_ERROR envelope.
"""

from __future__ import annotations

from typing import List

from starlette import status
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from setlist.core.errors import ValidationFailed

BYTES_PER_MB = 1024 * 1024


class BodyLimitMiddleware:
    """Reject oversized request bodies, declared or streamed."""

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            if not (declared.isascii() and declared.isdigit()):
                await self._reject(status.HTTP_400_BAD_REQUEST, "Invalid Content-Length header", scope, receive, send)
                return
            if int(declared) > self.max_bytes:
                await self._reject(413, "Request body too large", scope, receive, send)
                return

        buffered: List[Message] = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_bytes:
                await self._reject(413, "Request body too large", scope, receive, send)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, status_code: int, message: str, scope: Scope, receive: Receive, send: Send) -> None:
        details = {"max_bytes": self.max_bytes} if status_code == 413 else None
        response = JSONResponse(status_code=status_code, content=ValidationFailed(message, details).to_dict())
        await response(scope, receive, send)
