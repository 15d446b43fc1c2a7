# ruff: noqa: PLW0603
"""Async SQLAlchemy engine and session factory.

Provides:
- Declarative base shared by all ORM tables
- Engine and connection pool lifecycle
- Session factory used by services to open one transaction per operation
"""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from livecomment.config import get_settings
from livecomment.core.logging import get_logger


logger = get_logger(__name__)


# 64-bit keys. SQLite only autoincrements a column declared INTEGER.
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory services use.

    Objects stay readable after commit so hydrated rows can be returned.
    """
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    # Registers the ORM tables on Base.metadata
    import livecomment.comments.models  # noqa: F401, PLC0415
    import livecomment.users.models  # noqa: F401, PLC0415

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_created")


async def init_database() -> async_sessionmaker[AsyncSession]:
    """Create the engine, optionally create tables, and return the session factory.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached
    """
    global _engine

    settings = get_settings()

    engine_kwargs: dict = {"echo": settings.database_echo, "pool_pre_ping": True}
    if not settings.database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = settings.database_pool_size
        engine_kwargs["max_overflow"] = settings.database_max_overflow

    _engine = create_async_engine(settings.database_url, **engine_kwargs)

    # Fail fast when the database is unreachable
    async with _engine.connect():
        pass

    if settings.database_create_tables:
        await create_tables(_engine)

    session_factory = create_session_factory(_engine)
    logger.info("database_connected", url=_engine.url.render_as_string())
    return session_factory


async def shutdown_database() -> None:
    """Dispose of the engine and its connection pool."""
    global _engine

    if _engine is not None:
        await _engine.dispose()
        logger.info("database_disconnected")
    _engine = None
