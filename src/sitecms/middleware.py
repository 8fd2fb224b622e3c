# src/sitecms/middleware.py
import logging

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.sitecms.core.config import Settings
from src.sitecms.core.exceptions import PayloadTooLarge
from src.sitecms.errors import error_body

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than MAX_BODY_BYTES with 413.

    The body is read here and counted as it arrives, so chunked uploads
    without a Content-Length are limited too. Accepted bodies are replayed
    to the application unchanged.
    """

    def __init__(self, app: ASGIApp, settings: Settings):
        self.app = app
        self.settings = settings
        self.max_body_bytes = settings.MAX_BODY_BYTES

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > self.max_body_bytes:
            await self._reject(scope, receive, send)
            return

        messages: list[Message] = []
        received = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_bytes:
                await self._reject(scope, receive, send)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send):
        logger.info("Request body over %d bytes rejected on %s", self.max_body_bytes, scope.get("path"))
        exc = PayloadTooLarge()
        response = JSONResponse(
            status_code=exc.status_code,
            content=error_body(self.settings, exc.message, exc),
        )
        await response(scope, receive, send)
