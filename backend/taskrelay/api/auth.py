"""Registration, login, and profile endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status

from taskrelay.api.deps import SESSION_DEP, USER_DEP
from taskrelay.schemas.errors import ErrorResponse
from taskrelay.schemas.users import AuthResponse, UserCreate, UserLogin, UserRead, UserUpdate
from taskrelay.services import users as users_service

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskrelay.models.users import User

router = APIRouter(prefix="/auth", tags=["auth"])

_USER_EXAMPLE = {
    "id": "11111111-1111-1111-1111-111111111111",
    "name": "Alex Chen",
    "email": "alex@example.com",
    "created_at": "2026-01-05T09:30:00",
    "updated_at": "2026-01-05T09:30:00",
}


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register User",
    description="Create an account and return it with a bearer token.",
    responses={
        status.HTTP_201_CREATED: {
            "description": "Account created.",
            "content": {
                "application/json": {"example": {"user": _USER_EXAMPLE, "token": "eyJhbGciOi..."}}
            },
        },
        status.HTTP_409_CONFLICT: {
            "model": ErrorResponse,
            "description": "Email already registered.",
        },
    },
)
async def register(
    payload: UserCreate,
    session: AsyncSession = SESSION_DEP,
) -> AuthResponse:
    """Register a new user."""
    user, token = await users_service.register_user(session, payload=payload)
    return AuthResponse(user=UserRead.model_validate(user), token=token)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log In",
    description="Exchange email and password for a bearer token.",
    responses={
        status.HTTP_401_UNAUTHORIZED: {
            "model": ErrorResponse,
            "description": "Unknown email or wrong password.",
        },
    },
)
async def login(
    payload: UserLogin,
    session: AsyncSession = SESSION_DEP,
) -> AuthResponse:
    """Authenticate with email and password."""
    user, token = await users_service.authenticate_user(session, payload=payload)
    return AuthResponse(user=UserRead.model_validate(user), token=token)


@router.get("/profile", response_model=UserRead, summary="Get Profile")
async def get_profile(user: User = USER_DEP) -> UserRead:
    """Return the authenticated user's profile."""
    return UserRead.model_validate(user)


@router.put(
    "/profile",
    response_model=UserRead,
    summary="Update Profile",
    responses={
        status.HTTP_409_CONFLICT: {
            "model": ErrorResponse,
            "description": "Email belongs to another user.",
        },
    },
)
async def update_profile(
    payload: UserUpdate,
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
) -> UserRead:
    """Update the authenticated user's name and/or email."""
    updated = await users_service.update_profile(session, user=user, payload=payload)
    return UserRead.model_validate(updated)
