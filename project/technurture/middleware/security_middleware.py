# technurture/middleware/security_middleware.py

from starlette.datastructures import MutableHeaders
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

PAYLOAD_TOO_LARGE_MESSAGE = "Request payload too large. Please reduce content size or upload images separately."


class PayloadTooLargeError(HTTPException):
    """413 raised mid-stream; an HTTPException so body parsing re-raises it untouched."""

    def __init__(self, limit: int):
        super().__init__(status_code=413, detail=PAYLOAD_TOO_LARGE_MESSAGE)
        self.limit = limit


def payload_too_large_response() -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"success": False, "message": PAYLOAD_TOO_LARGE_MESSAGE, "error": "PAYLOAD_TOO_LARGE"},
    )


class SecurityHeadersMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message):
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in SECURITY_HEADERS.items():
                    headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_with_headers)


class BodySizeLimitMiddleware:
    """
    Rejects request bodies above max_bytes with 413. A declared
    Content-Length is checked up front; streamed bodies are counted and
    abort with PayloadTooLargeError once they cross the limit.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        for name, value in scope.get("headers", []):
            if name == b"content-length":
                try:
                    declared = int(value)
                except ValueError:
                    declared = 0
                if declared > self.max_bytes:
                    await payload_too_large_response()(scope, receive, send)
                    return

        received = 0

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise PayloadTooLargeError(self.max_bytes)
            return message

        await self.app(scope, counting_receive, send)
