"""Password hashing and bearer-token issuance/verification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import UUID

import bcrypt
import jwt

from taskrelay.core.config import settings

if TYPE_CHECKING:
    from taskrelay.models.users import User


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims carried by an access token."""

    user_id: UUID
    email: str | None
    expires_at: datetime


class InvalidTokenError(Exception):
    """Raised when a bearer token is malformed, forged, or expired."""


def hash_password(password: str) -> str:
    """Hash a password with a per-password bcrypt salt."""
    salt = bcrypt.gensalt(rounds=settings.password_hash_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against its stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def issue_access_token(user: User, *, now: datetime | None = None) -> str:
    """Sign a short-lived access token for `user`."""
    issued_at = now or datetime.now(UTC)
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=settings.jwt_expires_seconds),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Verify signature and expiry, returning the token's claims."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError as exc:
        raise InvalidTokenError("subject is not a user id") from exc
    email = payload.get("email")
    return TokenClaims(
        user_id=user_id,
        email=email if isinstance(email, str) else None,
        expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
    )
