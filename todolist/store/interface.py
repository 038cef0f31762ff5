from __future__ import annotations

from .models import Task


class TodoStore:
    """Pluggable Task Store interface.

    Implementations assign ids, merge partial updates and raise
    ``NotFoundError`` for unknown ids or ``StoreUnavailable`` when the
    backing database cannot serve the call.
    """

    def create_task(self, title: str) -> Task:  # pragma: no cover - interface only
        raise NotImplementedError

    def list_tasks(self) -> list[Task]:  # pragma: no cover - interface only
        raise NotImplementedError

    def get_task(self, task_id: str) -> Task:  # pragma: no cover - interface only
        raise NotImplementedError

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Task:  # pragma: no cover - interface only
        raise NotImplementedError

    def toggle_task(self, task_id: str) -> Task:
        current = self.get_task(task_id)
        return self.update_task(task_id, completed=not current.completed)

    def delete_task(self, task_id: str) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def delete_completed(self) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    def ping(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = ["TodoStore"]
