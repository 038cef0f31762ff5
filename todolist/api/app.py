from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, field_validator, model_validator

from todolist.observability import configure_uvicorn_logging, get_json_logger, get_metrics
from todolist.store import NotFoundError, StoreUnavailable, Task, TodoStore

T = TypeVar("T")


def _clean_title(value: str) -> str:
    v = value.strip()
    if not v:
        raise ValueError("title must be non-empty")
    return v


class CreateTodo(BaseModel):
    title: str

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _clean_title(value)


class UpdateTodo(BaseModel):
    title: str | None = None
    completed: bool | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, value: str | None) -> str | None:
        return None if value is None else _clean_title(value)

    @model_validator(mode="after")
    def _has_fields(self) -> UpdateTodo:
        if self.title is None and self.completed is None:
            raise ValueError("no fields to update")
        return self


class TodoOut(BaseModel):
    id: str
    title: str
    completed: bool


def _out(task: Task) -> TodoOut:
    return TodoOut.model_validate(task.to_wire())


def create_app(store: TodoStore) -> FastAPI:
    app = FastAPI(title="todolist")
    # Configure uvicorn logging at app creation to avoid import-time side effects
    configure_uvicorn_logging()
    logger = get_json_logger("todolist.api")
    metrics = get_metrics()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def _call(op: str, fn: Callable[..., T], *args: Any, todo_id: str | None = None) -> T:
        """Run one store operation off the event loop and map store errors to HTTP."""
        fields: dict[str, Any] = {"event": f"todo_{op}", "op": op, "service": "api"}
        if todo_id is not None:
            fields["todo_id"] = todo_id
        started = time.perf_counter()
        try:
            result = await asyncio.to_thread(fn, *args)
        except NotFoundError as exc:
            logger.info("todo not found", extra=fields)
            metrics.increment("todo_errors", {"op": op, "kind": "not_found"})
            raise HTTPException(status_code=404, detail="todo not found") from exc
        except StoreUnavailable as exc:
            logger.error("store unavailable", extra=fields, exc_info=True)
            metrics.increment("todo_errors", {"op": op, "kind": "store_unavailable"})
            raise HTTPException(status_code=503, detail="store unavailable") from exc
        except Exception as exc:
            logger.exception("unexpected store failure", extra=fields)
            metrics.increment("todo_errors", {"op": op, "kind": "internal"})
            raise HTTPException(status_code=500, detail="internal error") from exc
        fields["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 3)
        logger.info("todo request", extra=fields)
        metrics.increment("todo_requests", {"op": op})
        return result

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Server is running"

    @app.get("/health")
    async def health() -> dict[str, str]:  # lightweight healthcheck endpoint
        return {"status": "ok"}

    @app.get("/ready")
    async def ready() -> dict[str, str]:
        await _call("ready", store.ping)
        return {"status": "ok"}

    router = APIRouter(prefix="/api/todos")

    @router.get("", response_model=list[TodoOut])
    async def list_todos() -> list[TodoOut]:
        tasks = await _call("list", store.list_tasks)
        return [_out(t) for t in tasks]

    @router.post("", response_model=TodoOut, status_code=201)
    async def create_todo(body: CreateTodo) -> TodoOut:
        task = await _call("create", store.create_task, body.title)
        return _out(task)

    @router.put("/{todo_id}/toggle", response_model=TodoOut)
    async def toggle_todo(todo_id: str) -> TodoOut:
        task = await _call("toggle", store.toggle_task, todo_id, todo_id=todo_id)
        return _out(task)

    @router.put("/{todo_id}", response_model=TodoOut)
    async def update_todo(todo_id: str, body: UpdateTodo) -> TodoOut:
        def _update() -> Task:
            return store.update_task(todo_id, title=body.title, completed=body.completed)

        task = await _call("update", _update, todo_id=todo_id)
        return _out(task)

    # Declared before /{todo_id} so the literal path is matched first
    @router.delete("/completed")
    async def delete_completed() -> dict[str, Any]:
        deleted = await _call("delete_completed", store.delete_completed)
        return {"message": "Completed todos deleted", "deleted": deleted}

    @router.delete("/{todo_id}")
    async def delete_todo(todo_id: str) -> dict[str, Any]:
        await _call("delete", store.delete_task, todo_id, todo_id=todo_id)
        return {"message": "Todo deleted", "id": todo_id}

    app.include_router(router)
    return app


__all__ = ["CreateTodo", "TodoOut", "UpdateTodo", "create_app"]
