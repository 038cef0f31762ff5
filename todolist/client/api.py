from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

DEFAULT_BASE_URL = "http://localhost:5000"
TODOS_PATH = "/api/todos"


class Todo(BaseModel):
    """Client-side mirror of one task record as returned by the server."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str
    completed: bool = False


class TodoApi:
    """Thin async wrapper over the REST surface.

    Every method raises ``httpx.HTTPError`` (including ``HTTPStatusError`` for
    non-2xx responses); callers decide how a failure is surfaced.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"), transport=transport, timeout=timeout
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = await self._client.request(method, f"{TODOS_PATH}{path}", **kwargs)
        resp.raise_for_status()
        return resp.json()

    async def list_todos(self) -> list[Todo]:
        data = await self._request("GET", "")
        return [Todo.model_validate(item) for item in data]

    async def create(self, title: str) -> Todo:
        return Todo.model_validate(await self._request("POST", "", json={"title": title}))

    async def update(self, todo_id: str, title: str) -> Todo:
        data = await self._request("PUT", f"/{todo_id}", json={"title": title})
        return Todo.model_validate(data)

    async def toggle(self, todo_id: str) -> Todo:
        return Todo.model_validate(await self._request("PUT", f"/{todo_id}/toggle"))

    async def delete(self, todo_id: str) -> None:
        await self._request("DELETE", f"/{todo_id}")

    async def delete_completed(self) -> int:
        data = await self._request("DELETE", "/completed")
        return int(data.get("deleted", 0)) if isinstance(data, dict) else 0


__all__ = ["DEFAULT_BASE_URL", "Todo", "TodoApi"]
