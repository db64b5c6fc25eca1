from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..dependencies import get_todo_service
from ..schemas import TodoOut, UserCreate, UserOut
from ..services import TodoService
from ..utils import response_envelope

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


class UserEnvelope(BaseModel):
    message: str = Field(..., description="Outcome summary")
    data: UserOut


class UserListEnvelope(BaseModel):
    message: str = Field(..., description="Outcome summary")
    data: List[UserOut]


class UserTodosEnvelope(BaseModel):
    message: str = Field(..., description="Outcome summary")
    data: List[TodoOut]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    responses={
        201: {"description": "User created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_user(payload: UserCreate, service: TodoService = Depends(get_todo_service)) -> UserEnvelope:
    user = service.create_user(payload)
    return UserEnvelope(**response_envelope("Successfully created new user", UserOut(**user)))


# PUBLIC_INTERFACE
@router.get("", response_model=UserListEnvelope, summary="List Users")
def list_users(service: TodoService = Depends(get_todo_service)) -> UserListEnvelope:
    users = [UserOut(**u) for u in service.find_user_all()]
    return UserListEnvelope(**response_envelope("Successfully retrieved users", users))


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}",
    response_model=UserEnvelope,
    summary="Get User",
    responses={404: {"description": "User not found"}},
)
def get_user(user_id: str, service: TodoService = Depends(get_todo_service)) -> UserEnvelope:
    user = service.find_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserEnvelope(**response_envelope("Successfully retrieved the user", UserOut(**user)))


# PUBLIC_INTERFACE
@router.get("/{user_id}/todos", response_model=UserTodosEnvelope, summary="List Todos Of User")
def get_user_todos(user_id: str, service: TodoService = Depends(get_todo_service)) -> UserTodosEnvelope:
    """
    List the non-deleted todos owned by a user. Unknown users simply have no todos.
    """
    todos = [TodoOut(**t) for t in service.get_todos_by_user(user_id)]
    return UserTodosEnvelope(**response_envelope(f"Successfully retrieved todos of {user_id}", todos))
