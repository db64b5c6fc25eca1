from __future__ import annotations

from typing import Any, Dict, List, Optional


class TodoReminderError(Exception):
    """
    Base class for errors raised by the stores and the service layer.

    The `kind` tag lets transport code map errors to status codes without
    importing every subclass.
    """

    kind: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# PUBLIC_INTERFACE
class ValidationError(TodoReminderError):
    """Raised when input is malformed or a required field is missing."""

    kind = "validation"

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors: List[Dict[str, Any]] = errors or []


# PUBLIC_INTERFACE
class NotFoundError(TodoReminderError):
    """Raised when a referenced user or todo does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"{entity} with id {entity_id!r} was not found")
        self.entity = entity
        self.entity_id = entity_id
