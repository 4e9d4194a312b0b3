"""Public schema exports shared across API route modules."""

from taskrelay.schemas.errors import ErrorResponse
from taskrelay.schemas.health import HealthStatusResponse
from taskrelay.schemas.tasks import TaskCreate, TaskDeleteResponse, TaskRead, TaskUpdate
from taskrelay.schemas.users import (
    AuthResponse,
    UserCreate,
    UserDirectoryEntry,
    UserLogin,
    UserRead,
    UserUpdate,
)

__all__ = [
    "AuthResponse",
    "ErrorResponse",
    "HealthStatusResponse",
    "TaskCreate",
    "TaskDeleteResponse",
    "TaskRead",
    "TaskUpdate",
    "UserCreate",
    "UserDirectoryEntry",
    "UserLogin",
    "UserRead",
    "UserUpdate",
]
