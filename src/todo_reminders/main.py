from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import NotFoundError, ValidationError
from .logging_config import setup_logging
from .routers import todos as todos_router
from .routers import users as users_router
from .scheduler import RecurringScheduler
from .services import TodoService
from .settings import Settings, get_settings
from .stores import InMemoryTodoStore, InMemoryUserStore

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "users", "description": "Create and look up users."},
    {
        "name": "todos",
        "description": "Todo items with reminders, completion, soft delete and sharing between users.",
    },
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application with its own stores, service and scheduler.

    The reminder sweep is scheduled when the app starts (if enabled) and every
    scheduled job is stopped when it shuts down.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scheduler: RecurringScheduler = app.state.scheduler
        service: TodoService = app.state.todo_service
        if settings.enable_scheduler:
            scheduler.schedule_recurring(
                settings.reminder_job_name,
                settings.reminder_interval_seconds,
                service.process_reminders,
            )
        try:
            yield
        finally:
            scheduler.stop_all()
            logger.info("application shutting down")

    app = FastAPI(
        title="Todo Reminders",
        description="Todo list service with due-time reminders and sharing between users.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.todo_service = TodoService(InMemoryTodoStore(), InMemoryUserStore())
    app.state.scheduler = RecurringScheduler()

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "ValidationError", "message": exc.message, "detail": exc.errors},
        )

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"error": "NotFoundError", "message": exc.message, "entity": exc.entity},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "InternalServerError", "message": "Internal Server Error"},
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the running scheduled jobs.
        """
        return {"message": "Healthy", "scheduled_jobs": app.state.scheduler.names()}

    app.include_router(users_router.router)
    app.include_router(todos_router.router)
    return app


app = create_app()
