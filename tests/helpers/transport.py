from __future__ import annotations

from collections.abc import Callable

import httpx
from httpx import ASGITransport

from todolist.api.app import create_app
from todolist.store import TodoStore


class RecordingTransport(httpx.AsyncBaseTransport):
    """Serve requests from the real app over ASGI and keep a log of them.

    ``fail`` decides per request whether to answer with a 500 instead of
    reaching the app.
    """

    def __init__(
        self,
        store: TodoStore,
        fail: Callable[[httpx.Request], bool] | None = None,
    ) -> None:
        self._inner = ASGITransport(app=create_app(store))
        self.fail = fail
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail is not None and self.fail(request):
            return httpx.Response(500, json={"detail": "boom"}, request=request)
        return await self._inner.handle_async_request(request)

    def calls(self, method: str | None = None) -> list[str]:
        return [
            f"{r.method} {r.url.path}" for r in self.requests if method in (None, r.method)
        ]


__all__ = ["RecordingTransport"]
