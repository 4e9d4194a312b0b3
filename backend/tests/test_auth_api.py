# ruff: noqa: INP001
"""Integration tests for registration, login, profile, and the user directory."""

from __future__ import annotations

import pytest
from fastapi import APIRouter, FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from taskrelay.api.auth import router as auth_router
from taskrelay.api.users import router as users_router
from taskrelay.core.error_handling import install_error_handling
from taskrelay.db.session import get_session


async def _make_engine() -> AsyncEngine:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.connect() as conn, conn.begin():
        await conn.run_sync(SQLModel.metadata.create_all)
    return engine


def _build_test_app(
    session_maker: async_sessionmaker[AsyncSession],
) -> FastAPI:
    app = FastAPI()
    install_error_handling(app)
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(auth_router)
    api_v1.include_router(users_router)
    app.include_router(api_v1)

    async def _override_get_session() -> AsyncSession:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    return app


async def _register(
    client: AsyncClient,
    *,
    name: str,
    email: str,
    password: str = "hunter22",
) -> dict[str, object]:
    resp = await client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_register_login_and_profile_flow() -> None:
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    app = _build_test_app(session_maker)

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            registered = await _register(client, name="Alex Chen", email="  Alex@Example.com ")
            assert registered["user"]["email"] == "alex@example.com"
            assert "password_hash" not in registered["user"]
            assert isinstance(registered["token"], str) and registered["token"]

            login = await client.post(
                "/api/v1/auth/login",
                json={"email": "alex@example.com", "password": "hunter22"},
            )
            assert login.status_code == 200
            token = login.json()["token"]

            profile = await client.get(
                "/api/v1/auth/profile",
                headers={"Authorization": f"Bearer {token}"},
            )
            assert profile.status_code == 200
            assert profile.json()["id"] == registered["user"]["id"]

            renamed = await client.put(
                "/api/v1/auth/profile",
                json={"name": "Alex C."},
                headers={"Authorization": f"Bearer {token}"},
            )
            assert renamed.status_code == 200
            assert renamed.json()["name"] == "Alex C."
            assert renamed.json()["email"] == "alex@example.com"
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_duplicate_registration_and_bad_credentials() -> None:
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    app = _build_test_app(session_maker)

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            await _register(client, name="Alex", email="alex@example.com")

            duplicate = await client.post(
                "/api/v1/auth/register",
                json={"name": "Other", "email": "ALEX@example.com", "password": "hunter22"},
            )
            assert duplicate.status_code == 409
            assert duplicate.json()["detail"] == "User with this email already exists"

            wrong_password = await client.post(
                "/api/v1/auth/login",
                json={"email": "alex@example.com", "password": "nope-nope"},
            )
            unknown_email = await client.post(
                "/api/v1/auth/login",
                json={"email": "ghost@example.com", "password": "hunter22"},
            )
            assert wrong_password.status_code == 401
            assert unknown_email.status_code == 401
            assert wrong_password.json()["detail"] == unknown_email.json()["detail"]

            short_password = await client.post(
                "/api/v1/auth/register",
                json={"name": "Pat", "email": "pat@example.com", "password": "123"},
            )
            bad_email = await client.post(
                "/api/v1/auth/register",
                json={"name": "Pat", "email": "not-an-email", "password": "hunter22"},
            )
            assert short_password.status_code == 422
            assert bad_email.status_code == 422
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_profile_email_change_rejects_taken_address() -> None:
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    app = _build_test_app(session_maker)

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            await _register(client, name="Alex", email="alex@example.com")
            sam = await _register(client, name="Sam", email="sam@example.com")

            resp = await client.put(
                "/api/v1/auth/profile",
                json={"email": "alex@example.com"},
                headers={"Authorization": f"Bearer {sam['token']}"},
            )
            assert resp.status_code == 409
            assert resp.json()["detail"] == "Email is already taken"
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_protected_routes_require_valid_token() -> None:
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    app = _build_test_app(session_maker)

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            alex = await _register(client, name="Alex", email="alex@example.com")
            await _register(client, name="Bea", email="bea@example.com")

            missing = await client.get("/api/v1/users")
            assert missing.status_code == 401

            invalid = await client.get(
                "/api/v1/users",
                headers={"Authorization": "Bearer wrong-token"},
            )
            assert invalid.status_code == 401
            assert invalid.json()["detail"] == "Invalid or expired token"

            directory = await client.get(
                "/api/v1/users",
                headers={"Authorization": f"Bearer {alex['token']}"},
            )
            assert directory.status_code == 200
            entries = directory.json()
            assert [entry["name"] for entry in entries] == ["Alex", "Bea"]
            assert all(set(entry) == {"id", "name", "email"} for entry in entries)
    finally:
        await engine.dispose()
