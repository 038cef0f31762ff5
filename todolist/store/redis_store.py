from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import cast

import redis
from pydantic import ValidationError

from todolist.observability import get_json_logger

from .errors import NotFoundError, StoreUnavailable
from .interface import TodoStore
from .models import Task


@contextmanager
def _unavailable_on_redis_error(op: str) -> Iterator[None]:
    try:
        yield
    except redis.exceptions.RedisError as exc:
        raise StoreUnavailable(f"{op} failed: {exc}") from exc


class RedisTodoStore(TodoStore):
    """Redis-backed Task Store.

    Data structures:
    - Hash per task: key `{prefix}:task:{id}` with field `json`
    - Sorted set of all tasks for ordering by `created_at` timestamp:
      key `{prefix}:tasks` with score=created_at epoch seconds, member=task_id

    Updates run under WATCH on the task hash and retry when another client
    writes it first; a task deleted mid-update stays deleted.
    """

    def __init__(self, *, url: str, key_prefix: str = "todo") -> None:
        self._redis: redis.Redis = redis.Redis.from_url(url)
        self._prefix = key_prefix.rstrip(":")
        self._logger = get_json_logger("todolist.store")

    # key helpers
    def _task_key(self, task_id: str) -> str:
        return f"{self._prefix}:task:{task_id}"

    def _index_key(self) -> str:
        return f"{self._prefix}:tasks"

    @staticmethod
    def _dump(task: Task) -> str:
        return json.dumps(task.model_dump(mode="json"), separators=(",", ":"))

    def _load(self, task_id: str) -> Task | None:
        raw = cast(bytes | None, self._redis.hget(self._task_key(task_id), "json"))
        return self._decode(task_id, raw)

    def _decode(self, task_id: str, raw: bytes | None) -> Task | None:
        if raw is None:
            return None
        try:
            return Task.model_validate(json.loads(raw.decode("utf-8")))
        except (ValueError, ValidationError):
            self._logger.warning(
                "skipping unreadable task document",
                extra={"event": "store_corrupt_document", "todo_id": task_id},
            )
            return None

    def create_task(self, title: str) -> Task:
        task = Task(title=title)
        payload = self._dump(task)
        with _unavailable_on_redis_error("create"):
            p = self._redis.pipeline()
            p.hset(self._task_key(task.id), mapping={"json": payload})
            p.zadd(self._index_key(), {task.id: task.created_at.timestamp()})
            p.execute()
        return task

    def list_tasks(self) -> list[Task]:
        with _unavailable_on_redis_error("list"):
            ids_bytes = cast(list[bytes], self._redis.zrange(self._index_key(), 0, -1))
            result: list[Task] = []
            for raw_id in ids_bytes:
                t = self._load(raw_id.decode("utf-8"))
                if t is not None:
                    result.append(t)
        return result

    def get_task(self, task_id: str) -> Task:
        with _unavailable_on_redis_error("get"):
            task = self._load(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        def change(task: Task) -> None:
            if title is not None:
                task.title = title
            if completed is not None:
                task.completed = completed

        return self._modify(task_id, change, op="update")

    def toggle_task(self, task_id: str) -> Task:
        def change(task: Task) -> None:
            task.completed = not task.completed

        return self._modify(task_id, change, op="toggle")

    def _modify(self, task_id: str, change: Callable[[Task], None], *, op: str) -> Task:
        key = self._task_key(task_id)

        def apply(pipe: redis.client.Pipeline) -> Task:
            task = self._decode(task_id, cast(bytes | None, pipe.hget(key, "json")))
            if task is None:
                raise NotFoundError(task_id)
            change(task)
            pipe.multi()
            pipe.hset(key, mapping={"json": self._dump(task)})
            return task

        with _unavailable_on_redis_error(op):
            return cast(Task, self._redis.transaction(apply, key, value_from_callable=True))

    def delete_task(self, task_id: str) -> None:
        with _unavailable_on_redis_error("delete"):
            p = self._redis.pipeline()
            p.delete(self._task_key(task_id))
            p.zrem(self._index_key(), task_id)
            removed_hash, removed_member = p.execute()
        if not (int(removed_hash) or int(removed_member)):
            raise NotFoundError(task_id)

    def delete_completed(self) -> int:
        # Best-effort: each matching task is removed independently
        done = [t.id for t in self.list_tasks() if t.completed]
        if not done:
            return 0
        with _unavailable_on_redis_error("delete_completed"):
            p = self._redis.pipeline()
            p.delete(*[self._task_key(tid) for tid in done])
            p.zrem(self._index_key(), *done)
            deleted, _ = p.execute()
        return int(deleted)

    def ping(self) -> None:
        with _unavailable_on_redis_error("ping"):
            self._redis.ping()


__all__ = ["RedisTodoStore"]
