from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TodoStatus(str, Enum):
    """Lifecycle states of a todo."""

    PENDING = "PENDING"
    DONE = "DONE"
    REMINDER_DUE = "REMINDER_DUE"


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    A stored user record.

    Fields:
    - id: "user-<n>", assigned by the store
    - name: Display name (trimmed, non-empty)
    - email: Validated e-mail address
    - created_at: UTC creation timestamp
    """

    id: str
    name: str
    email: str
    created_at: datetime


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A stored todo record.

    Fields:
    - id: Unique identifier derived from the owner, the creation instant and a sequence
    - user_id: Id of the owning user, fixed at creation
    - title: Short title (trimmed, non-empty)
    - description: Free text; the service fills in "No Description" when omitted
    - status: PENDING, DONE or REMINDER_DUE
    - remind_at: Optional UTC time after which the todo becomes reminder due
    - deleted: Soft-delete flag; deleted todos are hidden from every query
    - created_at: UTC creation timestamp
    - updated_at: UTC timestamp of the last mutation
    """

    id: str
    user_id: str
    title: str
    description: Optional[str]
    status: TodoStatus
    remind_at: Optional[datetime]
    deleted: bool
    created_at: datetime
    updated_at: datetime
