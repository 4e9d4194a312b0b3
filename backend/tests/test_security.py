# ruff: noqa: INP001
"""Password hashing and access-token round trips."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import jwt
import pytest

from taskrelay.core.config import settings
from taskrelay.core.security import (
    InvalidTokenError,
    decode_access_token,
    hash_password,
    issue_access_token,
    verify_password,
)
from taskrelay.models.users import User


def _user() -> User:
    return User(id=uuid4(), name="Alex", email="alex@example.com", password_hash="x")


def test_password_hash_verifies_only_the_original_password() -> None:
    hashed = hash_password("s3cret!")

    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_non_bcrypt_hash() -> None:
    assert not verify_password("s3cret!", "plaintext")


def test_issued_token_decodes_to_user_claims() -> None:
    user = _user()

    claims = decode_access_token(issue_access_token(user))

    assert claims.user_id == user.id
    assert claims.email == user.email
    assert claims.expires_at > datetime.now(UTC)


def test_expired_token_is_rejected() -> None:
    issued = datetime.now(UTC) - timedelta(seconds=settings.jwt_expires_seconds + 60)
    token = issue_access_token(_user(), now=issued)

    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


def test_token_signed_with_other_secret_is_rejected() -> None:
    forged = jwt.encode(
        {"sub": str(uuid4()), "exp": datetime.now(UTC) + timedelta(hours=1)},
        "another-secret-0123456789-0123456789",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        decode_access_token(forged)


def test_token_with_non_uuid_subject_is_rejected() -> None:
    token = jwt.encode(
        {"sub": "not-a-uuid", "exp": datetime.now(UTC) + timedelta(hours=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(InvalidTokenError, match="subject"):
        decode_access_token(token)


def test_garbage_token_is_rejected() -> None:
    with pytest.raises(InvalidTokenError):
        decode_access_token("not.a.token")
