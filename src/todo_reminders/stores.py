from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional, Union

from .models import TodoEntity, TodoStatus, UserEntity
from .schemas import TodoDraft, TodoUpdate, UserCreate, parse_model, to_utc, utcnow

logger = logging.getLogger(__name__)

UserInput = Union[UserCreate, Mapping[str, Any]]
TodoInput = Union[TodoDraft, Mapping[str, Any]]
TodoUpdateInput = Union[TodoUpdate, Mapping[str, Any]]


# PUBLIC_INTERFACE
class UserStore(ABC):
    """Abstract storage contract for users."""

    @abstractmethod
    def create(self, data: UserInput) -> UserEntity:
        """Validate, persist and return a new UserEntity. Raises ValidationError on bad input."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        """Return a UserEntity by id, or None if not found."""

    @abstractmethod
    def find_all(self) -> List[UserEntity]:
        """Return every user in insertion order."""


# PUBLIC_INTERFACE
class TodoStore(ABC):
    """Abstract storage contract for todos."""

    @abstractmethod
    def create(self, data: TodoInput) -> TodoEntity:
        """Validate, persist and return a new TodoEntity. Raises ValidationError on bad input."""

    @abstractmethod
    def update(self, todo_id: str, data: TodoUpdateInput) -> Optional[TodoEntity]:
        """Update fields of an existing TodoEntity. Return updated entity or None if not found."""

    @abstractmethod
    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a non-deleted TodoEntity by id, or None."""

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> List[TodoEntity]:
        """Return the non-deleted todos owned by `user_id` in insertion order."""

    @abstractmethod
    def find_due_reminders(self, now: datetime) -> List[TodoEntity]:
        """
        Return the non-deleted PENDING todos whose remind_at is set and not
        later than `now`.
        """

    @abstractmethod
    def mark_reminder_due(self, todo_id: str) -> Optional[TodoEntity]:
        """
        Move a todo from PENDING to REMINDER_DUE in one step. Return the
        updated entity, or None when the todo is missing, deleted or no
        longer PENDING.
        """


class InMemoryUserStore(UserStore):
    """
    Thread-safe in-memory user store.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, UserEntity] = {}
        self._id_counter = 0

    def create(self, data: UserInput) -> UserEntity:
        payload = parse_model(UserCreate, data)
        with self._lock:
            self._id_counter += 1
            user: UserEntity = {
                "id": f"user-{self._id_counter}",
                "name": payload.name,
                "email": str(payload.email),
                "created_at": utcnow(),
            }
            self._items[user["id"]] = user
        logger.debug("created user id=%s", user["id"])
        return user.copy()

    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        with self._lock:
            item = self._items.get(user_id)
            return None if item is None else item.copy()

    def find_all(self) -> List[UserEntity]:
        with self._lock:
            return [u.copy() for u in self._items.values()]


class InMemoryTodoStore(TodoStore):
    """
    Thread-safe in-memory todo store. Records are never physically removed;
    soft-deleted todos stay in storage but are hidden from every query.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoEntity] = {}
        self._seq = 0

    def _allocate_id(self, user_id: str, now: datetime) -> str:
        # The sequence keeps ids unique when one user creates several todos in the same instant.
        with self._lock:
            self._seq += 1
            return f"todo-{user_id}-{now.strftime('%Y%m%dT%H%M%S%fZ')}-{self._seq}"

    def create(self, data: TodoInput) -> TodoEntity:
        draft = parse_model(TodoDraft, data)
        now = utcnow()
        with self._lock:
            entity: TodoEntity = {
                "id": self._allocate_id(draft.user_id, now),
                "user_id": draft.user_id,
                "title": draft.title,
                "description": draft.description,
                "status": draft.status,
                "remind_at": draft.remind_at,
                "deleted": draft.deleted,
                "created_at": now,
                "updated_at": now,
            }
            self._items[entity["id"]] = entity
        logger.debug("created todo id=%s user_id=%s", entity["id"], entity["user_id"])
        return entity.copy()

    def update(self, todo_id: str, data: TodoUpdateInput) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None

            changes = parse_model(TodoUpdate, data)
            provided = changes.model_fields_set

            # Update only provided fields
            updated = existing.copy()
            if changes.title is not None:
                updated["title"] = changes.title
            if changes.description is not None:
                updated["description"] = changes.description
            if changes.status is not None:
                updated["status"] = changes.status
            if changes.deleted is not None:
                updated["deleted"] = changes.deleted
            if changes.remind_at is not None or "remind_at" in provided:
                # Respect explicit clearing of remind_at
                updated["remind_at"] = changes.remind_at
            updated["updated_at"] = utcnow()

            self._items[todo_id] = updated
            return updated.copy()

    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            if item is None or item["deleted"]:
                return None
            return item.copy()

    def find_by_user_id(self, user_id: str) -> List[TodoEntity]:
        with self._lock:
            return [
                t.copy() for t in self._items.values()
                if t["user_id"] == user_id and not t["deleted"]
            ]

    def find_due_reminders(self, now: datetime) -> List[TodoEntity]:
        cutoff = to_utc(now)
        with self._lock:
            return [
                t.copy() for t in self._items.values()
                if not t["deleted"]
                and t["status"] == TodoStatus.PENDING
                and t["remind_at"] is not None
                and t["remind_at"] <= cutoff
            ]

    def mark_reminder_due(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            # status is re-read under the lock so a concurrent completion wins
            if existing is None or existing["deleted"] or existing["status"] != TodoStatus.PENDING:
                return None
            updated = existing.copy()
            updated["status"] = TodoStatus.REMINDER_DUE
            updated["updated_at"] = utcnow()
            self._items[todo_id] = updated
            return updated.copy()
