"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from taskrelay.models.tasks import Task
from taskrelay.models.users import User

__all__ = [
    "Task",
    "User",
]
