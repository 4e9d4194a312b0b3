"""Reusable FastAPI dependencies for auth, sessions, and live notifications.

Routes compose these instead of resolving the caller, the DB session, or the
notification channel themselves. Task authorization is not decided here; it
lives in `services.task_policy` and is applied by `services.task_mutations`
against a fresh read of the task.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends

from taskrelay.core.auth import AuthContext, get_auth_context, get_stream_auth_context
from taskrelay.db.session import get_session
from taskrelay.services.notifications import get_notification_channel

if TYPE_CHECKING:
    from taskrelay.models.users import User

AUTH_DEP = Depends(get_auth_context)
STREAM_AUTH_DEP = Depends(get_stream_auth_context)
SESSION_DEP = Depends(get_session)
CHANNEL_DEP = Depends(get_notification_channel)


def require_user(auth: AuthContext = AUTH_DEP) -> User:
    """Return the authenticated user."""
    return auth.user


USER_DEP = Depends(require_user)
