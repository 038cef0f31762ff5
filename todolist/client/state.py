from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .api import Todo

Filter = Literal["all", "completed", "pending"]
FILTERS: tuple[Filter, ...] = ("all", "completed", "pending")


@dataclass(slots=True)
class EditState:
    todo_id: str
    draft: str


@dataclass(slots=True)
class TodoState:
    """Everything the UI renders from.

    ``todos`` mirrors the server collection and is only replaced from server
    responses; ``filter`` is a pure projection over it.
    """

    todos: list[Todo] = field(default_factory=list)
    new_title: str = ""
    filter: Filter = "all"
    edit: EditState | None = None
    loading: bool = True
    error: str | None = None

    def visible(self) -> list[Todo]:
        return filter_todos(self.todos, self.filter)

    @property
    def all_completed(self) -> bool:
        return bool(self.todos) and all(t.completed for t in self.todos)

    def find(self, todo_id: str) -> Todo | None:
        return next((t for t in self.todos if t.id == todo_id), None)

    def replace(self, todo: Todo) -> None:
        self.todos = [todo if t.id == todo.id else t for t in self.todos]


def filter_todos(todos: list[Todo], flt: Filter) -> list[Todo]:
    if flt == "completed":
        return [t for t in todos if t.completed]
    if flt == "pending":
        return [t for t in todos if not t.completed]
    return list(todos)


def completion_buckets(todos: list[Todo]) -> list[Todo]:
    """Stable two-bucket ordering: incomplete tasks first, then completed ones."""
    return [t for t in todos if not t.completed] + [t for t in todos if t.completed]


__all__ = [
    "EditState",
    "FILTERS",
    "Filter",
    "TodoState",
    "completion_buckets",
    "filter_todos",
]
