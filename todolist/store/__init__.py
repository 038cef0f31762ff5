from .errors import NotFoundError, StoreError, StoreUnavailable
from .interface import TodoStore
from .models import Task

__all__ = ["NotFoundError", "StoreError", "StoreUnavailable", "Task", "TodoStore"]
