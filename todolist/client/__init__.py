from .api import DEFAULT_BASE_URL, Todo, TodoApi
from .app import TodoApp
from .state import EditState, TodoState

__all__ = ["DEFAULT_BASE_URL", "EditState", "Todo", "TodoApi", "TodoApp", "TodoState"]
