"""User directory endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from taskrelay.api.deps import SESSION_DEP, USER_DEP
from taskrelay.schemas.users import UserDirectoryEntry
from taskrelay.services import users as users_service

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskrelay.models.users import User

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserDirectoryEntry], summary="List Users")
async def list_users(
    session: AsyncSession = SESSION_DEP,
    _user: User = USER_DEP,
) -> list[UserDirectoryEntry]:
    """List users that tasks can be assigned to."""
    users = await users_service.list_users(session)
    return [UserDirectoryEntry.model_validate(user) for user in users]
