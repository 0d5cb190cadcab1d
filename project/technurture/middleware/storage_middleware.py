# technurture/middleware/storage_middleware.py

from starlette.types import ASGIApp, Receive, Scope, Send

from technurture.storage import get_storage


class StorageMiddleware:
    """Puts the process-wide storage backend on request.state.storage."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        state["storage"] = await get_storage()
        await self.app(scope, receive, send)
