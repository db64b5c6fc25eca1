"""
Todo Reminders package.

Users own todos that may carry a reminder time; a recurring sweep marks due
todos as REMINDER_DUE. The service layer (`services.TodoService`) works over
the store contracts in `stores`, and `main.create_app` exposes it over HTTP.
"""

from .errors import NotFoundError, TodoReminderError, ValidationError
from .models import TodoStatus
from .scheduler import RecurringScheduler
from .services import TodoService
from .stores import InMemoryTodoStore, InMemoryUserStore

__version__ = "0.1.0"

__all__ = [
    "InMemoryTodoStore",
    "InMemoryUserStore",
    "NotFoundError",
    "RecurringScheduler",
    "TodoReminderError",
    "TodoService",
    "TodoStatus",
    "ValidationError",
]
