"""User authentication helpers for bearer-token (JWT) auth."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskrelay.core.logging import get_logger
from taskrelay.core.security import InvalidTokenError, decode_access_token
from taskrelay.db.session import get_session, get_session_maker
from taskrelay.models.users import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import async_sessionmaker
    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)
SECURITY_DEP = Depends(security)
SESSION_DEP = Depends(get_session)
SESSION_MAKER_DEP = Depends(get_session_maker)
ACCESS_TOKEN_QUERY = Query(default=None, alias="access_token")


@dataclass
class AuthContext:
    """Authenticated user context resolved from inbound auth headers."""

    actor_type: Literal["user"]
    user: User


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    value = authorization.strip()
    if not value:
        return None
    if not value.lower().startswith("bearer "):
        return None
    token = value.split(" ", maxsplit=1)[1].strip()
    return token or None


def _non_empty_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


async def _resolve_token(session: AsyncSession, *, token: str | None) -> AuthContext:
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        claims = decode_access_token(token)
    except InvalidTokenError as exc:
        logger.info("auth.token.rejected reason=%s", str(exc)[:120])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from exc
    user = await User.objects.by_id(claims.user_id).first(session)
    if user is None:
        # Token outlived its account.
        logger.info("auth.token.unknown_user user_id=%s", claims.user_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return AuthContext(actor_type="user", user=user)


async def get_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = SECURITY_DEP,
    session: AsyncSession = SESSION_DEP,
) -> AuthContext:
    """Resolve required authenticated user context from the bearer token."""
    token = _extract_bearer_token(request.headers.get("Authorization"))
    return await _resolve_token(session, token=token)


async def get_stream_auth_context(
    request: Request,
    access_token: str | None = ACCESS_TOKEN_QUERY,
    session_maker: async_sessionmaker[AsyncSession] = SESSION_MAKER_DEP,
) -> AuthContext:
    """Resolve user context for EventSource clients.

    Browsers cannot set headers on `EventSource`, so the token may also come
    from the `access_token` query parameter. The header wins when both exist.
    The lookup uses its own session, closed before the stream starts, so a
    long-lived stream holds no database connection.
    """
    token = _extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        token = _non_empty_str(access_token)
    async with session_maker() as session:
        return await _resolve_token(session, token=token)
