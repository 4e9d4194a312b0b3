"""User registration, login, and profile helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from taskrelay.core.logging import get_logger
from taskrelay.core.security import hash_password, issue_access_token, verify_password
from taskrelay.core.time import utcnow
from taskrelay.models.users import User

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskrelay.schemas.users import UserCreate, UserLogin, UserUpdate

logger = get_logger(__name__)

_ERR_EMAIL_EXISTS = "User with this email already exists"
_ERR_EMAIL_TAKEN = "Email is already taken"
_ERR_INVALID_CREDENTIALS = "Invalid credentials"


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    return await User.objects.filter_by(email=email.strip().lower()).first(session)


async def register_user(session: AsyncSession, *, payload: UserCreate) -> tuple[User, str]:
    """Create a user and return it with a fresh access token."""
    if await get_user_by_email(session, payload.email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_ERR_EMAIL_EXISTS)

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email.
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_ERR_EMAIL_EXISTS,
        ) from exc
    await session.refresh(user)
    logger.info("user.register user_id=%s", user.id)
    return user, issue_access_token(user)


async def authenticate_user(session: AsyncSession, *, payload: UserLogin) -> tuple[User, str]:
    """Verify credentials and return the user with a fresh access token."""
    user = await get_user_by_email(session, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("user.login.failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_ERR_INVALID_CREDENTIALS,
        )
    logger.info("user.login user_id=%s", user.id)
    return user, issue_access_token(user)


async def update_profile(
    session: AsyncSession,
    *,
    user: User,
    payload: UserUpdate,
) -> User:
    """Apply a partial name/email update, keeping emails unique."""
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    email = updates.get("email")
    if email is not None and email != user.email:
        existing = await get_user_by_email(session, email)
        if existing is not None and existing.id != user.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_ERR_EMAIL_TAKEN)

    for key, value in updates.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def list_users(session: AsyncSession) -> list[User]:
    """All users ordered by name, for assignee pickers."""
    return await User.objects.all().order_by(col(User.name).asc()).all(session)


async def user_exists(session: AsyncSession, user_id: UUID) -> bool:
    return await User.objects.by_id(user_id).first(session) is not None
