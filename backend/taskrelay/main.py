"""FastAPI application entrypoint and router wiring for the backend."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import APIRouter, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from taskrelay.api.auth import router as auth_router
from taskrelay.api.notifications import router as notifications_router
from taskrelay.api.tasks import router as tasks_router
from taskrelay.api.users import router as users_router
from taskrelay.core.config import settings
from taskrelay.core.error_handling import install_error_handling
from taskrelay.core.logging import configure_logging, get_logger
from taskrelay.db.session import check_database, init_db
from taskrelay.schemas.health import HealthStatusResponse
from taskrelay.services.notifications import close_notification_channel

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

configure_logging()
logger = get_logger(__name__)
OPENAPI_TAGS = [
    {
        "name": "auth",
        "description": "Registration, login, and profile endpoints issuing bearer tokens.",
    },
    {
        "name": "health",
        "description": (
            "Service liveness/readiness probes used by infrastructure and runtime checks."
        ),
    },
    {
        "name": "tasks",
        "description": (
            "Task CRUD. Changes are limited to the creator or assignee and are "
            "announced to affected users."
        ),
    },
    {
        "name": "users",
        "description": "User directory used to pick task assignees.",
    },
    {
        "name": "notifications",
        "description": "Server-sent event stream of live task notifications.",
    },
]
_HEALTHY_RESPONSE = {
    status.HTTP_200_OK: {
        "description": "Service is alive.",
        "content": {"application/json": {"example": {"ok": True}}},
    }
}


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize application resources before serving requests."""
    logger.info(
        "app.lifecycle.starting environment=%s db_auto_migrate=%s notification_backend=%s",
        settings.environment,
        settings.db_auto_migrate,
        settings.notification_backend.value,
    )
    await init_db()
    logger.info("app.lifecycle.started")
    try:
        yield
    finally:
        await close_notification_channel()
        logger.info("app.lifecycle.stopped")


app = FastAPI(
    title="Task Relay API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("app.cors.enabled origins_count=%s", len(origins))
else:
    logger.info("app.cors.disabled")

install_error_handling(app)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Health Check",
    description="Lightweight liveness probe endpoint.",
    responses=_HEALTHY_RESPONSE,
)
def health() -> HealthStatusResponse:
    """Lightweight liveness probe endpoint."""
    return HealthStatusResponse(ok=True)


@app.get(
    "/healthz",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Health Alias Check",
    description="Alias liveness probe endpoint for platform compatibility.",
    responses=_HEALTHY_RESPONSE,
)
def healthz() -> HealthStatusResponse:
    """Alias liveness probe endpoint for platform compatibility."""
    return HealthStatusResponse(ok=True)


@app.get(
    "/readyz",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Readiness Check",
    description="Readiness probe; fails with 503 while the database is unreachable.",
    responses={
        status.HTTP_200_OK: {
            "description": "Service is ready.",
            "content": {"application/json": {"example": {"ok": True}}},
        },
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Database is unreachable."},
    },
)
async def readyz() -> HealthStatusResponse:
    """Readiness probe endpoint for service orchestration checks."""
    try:
        await check_database()
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("app.readyz.database_unavailable error=%s", str(exc)[:200])
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from exc
    return HealthStatusResponse(ok=True)


api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(auth_router)
api_v1.include_router(users_router)
api_v1.include_router(tasks_router)
api_v1.include_router(notifications_router)
app.include_router(api_v1)

logger.debug("app.routes.registered count=%s", len(app.routes))
