"""Async engine, request sessions, schema bootstrap, and the readiness query."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from alembic import command
from alembic.config import Config
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import taskrelay.models  # noqa: F401  registers the tables on SQLModel.metadata
from taskrelay.core.config import settings
from taskrelay.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.engine import Connection

logger = get_logger(__name__)
ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"
_POSTGRES_SCHEMES = ("postgres", "postgresql")


def normalize_database_url(database_url: str) -> str:
    """Map `postgres://` and bare `postgresql://` URLs onto the psycopg driver."""
    scheme, sep, rest = database_url.partition("://")
    if sep and scheme in _POSTGRES_SCHEMES:
        return f"postgresql+psycopg://{rest}"
    return database_url


def is_sqlite_url(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _build_engine(database_url: str) -> AsyncEngine:
    url = normalize_database_url(database_url)
    if is_sqlite_url(url):
        return create_async_engine(url)
    return create_async_engine(url, pool_pre_ping=True)


async_engine: AsyncEngine = _build_engine(settings.database_url)
async_session_maker = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def _upgrade_to_head(connection: Connection) -> None:
    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.attributes["configure_logger"] = False
    alembic_cfg.attributes["connection"] = connection
    command.upgrade(alembic_cfg, "head")


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Bring the schema up to date on startup.

    Postgres with `DB_AUTO_MIGRATE` runs the Alembic revisions over the app's
    own engine. Anything else (local sqlite, tests) creates missing tables.
    """
    engine = engine or async_engine
    if settings.db_auto_migrate and engine.dialect.name != "sqlite":
        logger.info("db.migrations.start")
        async with engine.begin() as conn:
            await conn.run_sync(_upgrade_to_head)
        logger.info("db.migrations.complete")
        return

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("db.schema.created dialect=%s", engine.dialect.name)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; anything left uncommitted is rolled back."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory for callers that must release their session early."""
    return async_session_maker


async def check_database(engine: AsyncEngine | None = None) -> None:
    """Run a trivial round-trip query; raises when the database is unreachable."""
    async with (engine or async_engine).connect() as conn:
        await conn.execute(text("SELECT 1"))
