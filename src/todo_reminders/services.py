from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from .errors import NotFoundError
from .models import TodoEntity, TodoStatus, UserEntity
from .schemas import ShareRequest, TodoCreate, parse_model, utcnow
from .stores import TodoStore, TodoUpdateInput, UserInput, UserStore

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "No Description"


# PUBLIC_INTERFACE
class TodoService:
    """
    Orchestrates the user and todo stores.

    Stores signal absent records with None; this layer turns the lookups it
    depends on into NotFoundError.
    """

    def __init__(self, todo_store: TodoStore, user_store: UserStore) -> None:
        self._todos = todo_store
        self._users = user_store

    # Users

    def create_user(self, data: UserInput) -> UserEntity:
        return self._users.create(data)

    def find_user_by_id(self, user_id: str) -> Optional[UserEntity]:
        return self._users.find_by_id(user_id)

    def find_user_all(self) -> List[UserEntity]:
        return self._users.find_all()

    # Todos

    def create_todo(self, data: Union[TodoCreate, Mapping[str, Any]]) -> TodoEntity:
        """
        Create a PENDING todo for an existing user.

        Raises:
            ValidationError: if the input is malformed.
            NotFoundError: if the owning user does not exist.
        """
        request = parse_model(TodoCreate, data)
        if self._users.find_by_id(request.user_id) is None:
            raise NotFoundError("user", request.user_id)

        return self._todos.create(
            {
                "user_id": request.user_id,
                "title": request.title,
                "description": request.description or DEFAULT_DESCRIPTION,
                "status": TodoStatus.PENDING,
                "remind_at": request.remind_at,
            }
        )

    def find_todo_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        return self._todos.find_by_id(todo_id)

    def update_todo(self, todo_id: str, data: TodoUpdateInput) -> Optional[TodoEntity]:
        return self._todos.update(todo_id, data)

    def delete_todo(self, todo_id: str) -> Optional[TodoEntity]:
        """Soft delete; the record stays in storage but disappears from queries."""
        if self._todos.find_by_id(todo_id) is None:
            return None
        return self._todos.update(todo_id, {"deleted": True})

    def get_todos_by_user(self, user_id: str) -> List[TodoEntity]:
        return self._todos.find_by_user_id(user_id)

    def complete_todo(self, todo_id: str) -> TodoEntity:
        """
        Mark a todo as DONE. Completing an already DONE todo returns it unchanged.

        Raises:
            NotFoundError: if the todo does not exist.
        """
        todo = self._todos.find_by_id(todo_id)
        if todo is None:
            raise NotFoundError("todo", todo_id)

        if todo["status"] == TodoStatus.DONE:
            return todo

        updated = self._todos.update(todo_id, {"status": TodoStatus.DONE})
        if updated is None:
            raise NotFoundError("todo", todo_id)
        return updated

    def process_reminders(self, now: Optional[datetime] = None) -> int:
        """
        Move every due PENDING todo to REMINDER_DUE and return how many moved.
        Called by the scheduler on each tick.
        """
        due = self._todos.find_due_reminders(now or utcnow())
        marked = 0
        for todo in due:
            # todos completed or deleted since the snapshot are left alone
            if self._todos.mark_reminder_due(todo["id"]) is not None:
                marked += 1
        if marked:
            logger.info("reminder sweep marked %d todo(s) as reminder due", marked)
        return marked

    def share(self, payload: Union[ShareRequest, Mapping[str, Any]]) -> TodoEntity:
        """
        Copy a todo to another user. The copy gets its own id and timestamps
        and evolves independently of the source.

        Raises:
            ValidationError: if the payload is malformed.
            NotFoundError: if the todo or the target user does not exist.
        """
        request = parse_model(ShareRequest, payload)
        todo = self._todos.find_by_id(request.id)
        if todo is None:
            raise NotFoundError("todo", request.id)

        user = self._users.find_by_id(request.user_id_target)
        if user is None:
            raise NotFoundError("user", request.user_id_target)

        shared = self._todos.create(
            {
                "user_id": user["id"],
                "title": todo["title"],
                "description": todo["description"],
                "status": todo["status"],
                "remind_at": todo["remind_at"],
            }
        )
        logger.info("shared todo id=%s to user_id=%s as id=%s", todo["id"], user["id"], shared["id"])
        return shared
