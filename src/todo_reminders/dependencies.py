from __future__ import annotations

from fastapi import Request

from .services import TodoService


# PUBLIC_INTERFACE
def get_todo_service(request: Request) -> TodoService:
    """Return the TodoService wired onto the running application."""
    return request.app.state.todo_service
