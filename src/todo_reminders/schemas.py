from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import TodoStatus

# Shared type for incoming remind_at which can be a date, datetime, or ISO8601 string
RemindAtInput = Union[date, datetime, str]

TITLE_MAX_LENGTH = 200

M = TypeVar("M", bound=BaseModel)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_remind_at(value: Optional[RemindAtInput]) -> Optional[datetime]:
    """
    Internal helper to normalize remind_at input into an aware UTC datetime.
    - If value is a string, parse it as ISO8601 via datetime.fromisoformat, which accepts
      basic (20250131T134500Z) and extended forms; a date-only string becomes 00:00 UTC.
    - If value is a date (not datetime), convert to datetime at 00:00 UTC.
    - If value is a datetime, convert it to UTC (naive values are taken as UTC).
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, str):
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(s))
        except ValueError:
            try:
                d = date.fromisoformat(s)
                return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
            except ValueError as e:
                raise ValueError(
                    "Invalid remind_at format. Use ISO8601 date or datetime string "
                    "(e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
                ) from e

    raise ValueError("Invalid type for remind_at; expected date, datetime, or ISO8601 string.")


def _strip_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    s = v.strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError(f"title length must be between 1 and {TITLE_MAX_LENGTH} characters")
    return s


# PUBLIC_INTERFACE
def parse_model(model: Type[M], data: Union[BaseModel, Mapping[str, Any]]) -> M:
    """
    Validate `data` against `model` and return the model instance.

    Accepts an instance of `model` (returned as-is), any other pydantic model
    (re-validated from its explicitly set fields) or a plain mapping.

    Raises:
        ValidationError: if the data does not satisfy the model.
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        summary = "; ".join(
            f"{'.'.join(str(p) for p in d['loc']) or model.__name__}: {d['msg']}" for d in details
        )
        raise ValidationError(f"Invalid {model.__name__} data: {summary}", errors=details) from exc


# PUBLIC_INTERFACE
class UserCreate(BaseModel):
    """
    Schema for creating a new user.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Alice", "email": "alice@example.com"}}
    )

    name: str = Field(..., description="Display name of the user", min_length=1, max_length=200)
    email: EmailStr = Field(..., description="E-mail address of the user")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """
        Strip whitespace and reject names that are empty or only whitespace.
        """
        s = v.strip()
        if not s:
            raise ValueError("name cannot be empty or only whitespace")
        return s


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """Schema returned by the API for a user."""

    id: str = Field(..., description="Unique identifier of the user")
    name: str = Field(..., description="Display name of the user")
    email: str = Field(..., description="E-mail address of the user")
    created_at: datetime = Field(..., description="Creation timestamp")


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Request schema for creating a todo on behalf of a user.

    Status is not accepted here: new todos always start as PENDING.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "user-1",
                "title": "Pay rent",
                "description": "Transfer before the 1st",
                "remind_at": "2025-02-01T09:00:00Z",
            }
        }
    )

    user_id: str = Field(..., description="Id of the owning user", min_length=1)
    title: str = Field(..., description="Short title for the todo item", min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    remind_at: Optional[datetime] = Field(
        default=None,
        description="When the todo becomes reminder due. Accepts ISO8601 date or datetime",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _strip_title(v)  # type: ignore[return-value]

    @field_validator("remind_at", mode="before")
    @classmethod
    def parse_remind_at(cls, v: Optional[RemindAtInput]) -> Optional[datetime]:
        return _parse_remind_at(v)


# PUBLIC_INTERFACE
class TodoDraft(BaseModel):
    """
    Full set of fields persisted for a new todo, before the store assigns
    its id and timestamps.
    """

    user_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    status: TodoStatus = TodoStatus.PENDING
    remind_at: Optional[datetime] = None
    deleted: bool = False

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _strip_title(v)  # type: ignore[return-value]

    @field_validator("remind_at", mode="before")
    @classmethod
    def parse_remind_at(cls, v: Optional[RemindAtInput]) -> Optional[datetime]:
        return _parse_remind_at(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing todo.
    All fields are optional; only provided fields will be updated.
    Identity fields (id, user_id, created_at) are not part of the schema and
    are dropped if sent.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Pay rent and utilities",
                "status": "DONE",
                "remind_at": None,
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Detailed description")
    status: Optional[TodoStatus] = Field(default=None, description="PENDING, DONE or REMINDER_DUE")
    remind_at: Optional[datetime] = Field(
        default=None,
        description="Reminder time; send null explicitly to clear it",
    )
    deleted: Optional[bool] = Field(default=None, description="Soft-delete flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        return _strip_title(v)

    @field_validator("remind_at", mode="before")
    @classmethod
    def parse_remind_at(cls, v: Optional[RemindAtInput]) -> Optional[datetime]:
        return _parse_remind_at(v)


# PUBLIC_INTERFACE
class ShareRequest(BaseModel):
    """Copy the todo `id` to the user `user_id_target`."""

    id: str = Field(..., min_length=1, description="Id of the todo to share")
    user_id_target: str = Field(..., min_length=1, description="Id of the receiving user")


# PUBLIC_INTERFACE
class ShareBody(BaseModel):
    """Request body of the share endpoint; the todo id comes from the path."""

    user_id_target: str = Field(..., min_length=1, description="Id of the receiving user")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a todo.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "todo-user-1-20250125T101530123456Z-1",
                "user_id": "user-1",
                "title": "Pay rent",
                "description": "No Description",
                "status": "PENDING",
                "remind_at": "2025-02-01T09:00:00Z",
                "deleted": False,
                "created_at": "2025-01-25T10:15:30.123456Z",
                "updated_at": "2025-01-25T10:15:30.123456Z",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the todo")
    user_id: str = Field(..., description="Id of the owning user")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Detailed description")
    status: TodoStatus = Field(..., description="PENDING, DONE or REMINDER_DUE")
    remind_at: Optional[datetime] = Field(default=None, description="Reminder time as an ISO8601 datetime")
    deleted: bool = Field(default=False, description="Soft-delete flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
