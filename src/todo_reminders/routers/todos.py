from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..dependencies import get_todo_service
from ..schemas import ShareBody, ShareRequest, TodoCreate, TodoOut, TodoUpdate
from ..services import TodoService
from ..utils import response_envelope

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)


class TodoEnvelope(BaseModel):
    """
    Envelope for single-todo responses.
    """
    message: str = Field(..., description="Outcome summary")
    data: TodoOut


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a PENDING todo for an existing user.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
        404: {"description": "Owning user not found"},
    },
)
def create_todo(payload: TodoCreate, service: TodoService = Depends(get_todo_service)) -> TodoEnvelope:
    created = service.create_todo(payload)
    return TodoEnvelope(**response_envelope("Successfully created new to-do", TodoOut(**created)))


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Get Todo",
    responses={
        200: {"description": "Todo found"},
        404: {"description": "Todo not found"},
    },
)
def get_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> TodoEnvelope:
    item = service.find_todo_by_id(todo_id)
    if item is None:
        raise _not_found()
    return TodoEnvelope(**response_envelope(f"Successfully retrieved to-do with id {todo_id}", TodoOut(**item)))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Update Todo",
    description="Partially update fields of a todo. Identity fields are ignored.",
    responses={
        200: {"description": "Todo updated"},
        422: {"description": "Validation error"},
        404: {"description": "Todo not found"},
    },
)
def update_todo(todo_id: str, payload: TodoUpdate, service: TodoService = Depends(get_todo_service)) -> TodoEnvelope:
    if service.find_todo_by_id(todo_id) is None:
        raise _not_found()
    updated = service.update_todo(todo_id, payload)
    if updated is None:
        raise _not_found()
    return TodoEnvelope(**response_envelope(f"Successfully updated to-do with id {todo_id}", TodoOut(**updated)))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Delete Todo",
    description="Soft delete a todo. It disappears from every query but stays in storage.",
    responses={
        200: {"description": "Todo deleted"},
        404: {"description": "Todo not found"},
    },
)
def delete_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> TodoEnvelope:
    deleted = service.delete_todo(todo_id)
    if deleted is None:
        raise _not_found()
    return TodoEnvelope(**response_envelope(f"Successfully deleted to-do with id {todo_id}", TodoOut(**deleted)))


# PUBLIC_INTERFACE
@router.post(
    "/{todo_id}/complete",
    response_model=TodoEnvelope,
    summary="Complete Todo",
    responses={404: {"description": "Todo not found"}},
)
def complete_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> TodoEnvelope:
    done = service.complete_todo(todo_id)
    return TodoEnvelope(**response_envelope(f"Successfully completed to-do with id {todo_id}", TodoOut(**done)))


# PUBLIC_INTERFACE
@router.post(
    "/{todo_id}/share",
    response_model=TodoEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Share Todo",
    description="Copy a todo to another user. The copy evolves independently of the source todo.",
    responses={
        201: {"description": "Todo shared"},
        404: {"description": "Todo or target user not found"},
    },
)
def share_todo(todo_id: str, payload: ShareBody, service: TodoService = Depends(get_todo_service)) -> TodoEnvelope:
    shared = service.share(ShareRequest(id=todo_id, user_id_target=payload.user_id_target))
    return TodoEnvelope(**response_envelope("The todo has been successfully shared", TodoOut(**shared)))
