from __future__ import annotations


class StoreError(Exception):
    """Base class for Task Store failures."""


class NotFoundError(StoreError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"todo not found: {task_id}")
        self.task_id = task_id


class StoreUnavailable(StoreError):
    """The backing database could not be reached or rejected the operation."""


__all__ = ["StoreError", "NotFoundError", "StoreUnavailable"]
