from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import httpx

from todolist.observability import get_json_logger

from .api import Todo, TodoApi
from .state import FILTERS, EditState, Filter, TodoState, completion_buckets

Confirm = Callable[[str], Awaitable[bool]]

# Network and decoding failures a single request can end with
REQUEST_ERRORS = (httpx.HTTPError, ValueError)

FETCH_ERROR = "Failed to fetch todos. Please try again."
DELETE_ERROR = "Failed to delete todo. Please try again."
DELETE_COMPLETED_ERROR = "Failed to delete completed todos. Please try again."

SHORTCUTS: dict[str, str] = {
    "c-a": "toggle_all",
    "c-d": "delete_completed",
}


class TodoApp:
    """UI controller: applies user actions to ``TodoState`` via the REST API.

    Each action issues its request(s), waits for the response and then
    reconciles the cache from what the server returned. No action raises on
    a failed request: list and delete failures set ``state.error``, the rest
    are logged and leave the state as it was.
    """

    def __init__(self, api: TodoApi, confirm: Confirm, state: TodoState | None = None) -> None:
        self.api = api
        self.state = state or TodoState()
        self._confirm = confirm
        self._logger = get_json_logger("todolist.client")

    def _log_failure(self, op: str, exc: Exception, todo_id: str | None = None) -> None:
        extra: dict[str, object] = {
            "event": "client_error",
            "op": op,
            "service": "client",
            "attributes": {"error": str(exc)[:200]},
        }
        if todo_id is not None:
            extra["todo_id"] = todo_id
        self._logger.error("request failed", extra=extra)

    async def load(self) -> None:
        self.state.loading = True
        self.state.error = None
        try:
            self.state.todos = await self.api.list_todos()
        except REQUEST_ERRORS as exc:
            self.state.error = FETCH_ERROR
            self._log_failure("load", exc)
        finally:
            self.state.loading = False

    async def add(self, title: str | None = None) -> Todo | None:
        if title is not None:
            self.state.new_title = title
        if not self.state.new_title.strip():
            return None
        try:
            created = await self.api.create(self.state.new_title)
        except REQUEST_ERRORS as exc:
            self._log_failure("create", exc)
            return None
        self.state.todos = [created, *self.state.todos]
        self.state.new_title = ""
        return created

    async def toggle(self, todo_id: str) -> Todo | None:
        try:
            updated = await self.api.toggle(todo_id)
        except REQUEST_ERRORS as exc:
            self._log_failure("toggle", exc, todo_id)
            return None
        self.state.replace(updated)
        return updated

    def start_edit(self, todo_id: str) -> None:
        todo = self.state.find(todo_id)
        if todo is None:
            return
        # Single-record edit mode: any other unsaved draft is dropped
        self.state.edit = EditState(todo_id=todo.id, draft=todo.title)

    def set_draft(self, text: str) -> None:
        if self.state.edit is not None:
            self.state.edit.draft = text

    def cancel_edit(self) -> None:
        self.state.edit = None

    async def save_edit(self) -> Todo | None:
        edit = self.state.edit
        if edit is None or not edit.draft.strip():
            return None
        try:
            updated = await self.api.update(edit.todo_id, edit.draft)
        except REQUEST_ERRORS as exc:
            self._log_failure("update", exc, edit.todo_id)
            return None
        self.state.replace(updated)
        self.state.edit = None
        return updated

    async def delete(self, todo_id: str) -> bool:
        if not await self._confirm("Are you sure you want to delete this todo?"):
            return False
        try:
            await self.api.delete(todo_id)
        except REQUEST_ERRORS as exc:
            self.state.error = DELETE_ERROR
            self._log_failure("delete", exc, todo_id)
            return False
        self.state.todos = [t for t in self.state.todos if t.id != todo_id]
        return True

    async def delete_completed(self) -> bool:
        if not await self._confirm("Are you sure you want to delete all completed todos?"):
            return False
        try:
            await self.api.delete_completed()
        except REQUEST_ERRORS as exc:
            self.state.error = DELETE_COMPLETED_ERROR
            self._log_failure("delete_completed", exc)
            return False
        self.state.todos = [t for t in self.state.todos if not t.completed]
        return True

    async def toggle_all(self) -> None:
        """Mark every task completed, or un-mark all when all are completed.

        Fans out one toggle per mismatched task, joins on all of them and
        rebuilds the cache once. Failed toggles keep their previous record;
        successful ones are not rolled back.
        """
        todos = list(self.state.todos)
        if not todos:
            return
        target = not all(t.completed for t in todos)
        mismatched = [t for t in todos if t.completed != target]
        results = await asyncio.gather(
            *(self.api.toggle(t.id) for t in mismatched), return_exceptions=True
        )
        updated: dict[str, Todo] = {}
        for todo, result in zip(mismatched, results, strict=True):
            if isinstance(result, Todo):
                updated[todo.id] = result
            elif isinstance(result, REQUEST_ERRORS):
                self._log_failure("toggle_all", result, todo.id)
            elif isinstance(result, BaseException):
                raise result
        self.state.todos = completion_buckets([updated.get(t.id, t) for t in todos])
        self._logger.info(
            "toggle all",
            extra={
                "event": "client_toggle_all",
                "service": "client",
                "count": len(updated),
                "attributes": {"requested": len(mismatched), "target": target},
            },
        )

    def set_filter(self, flt: str) -> None:
        if flt not in FILTERS:
            raise ValueError(f"unknown filter: {flt}")
        self.state.filter = flt  # type: ignore[assignment]

    async def handle_key(self, key: str) -> bool:
        """Dispatch a global shortcut. Returns True when the key was consumed."""
        action = SHORTCUTS.get(key)
        if action == "toggle_all":
            await self.toggle_all()
            return True
        if action == "delete_completed":
            await self.delete_completed()
            return True
        return False


__all__ = ["Confirm", "SHORTCUTS", "TodoApp", "Filter"]
