"""
NoFuss Database Configuration

SQLAlchemy async engine with SQLite for development.
Supports migration to PostgreSQL for production.
"""
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import event
from .config import settings


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {
            "timeout": 30,  # Wait up to 30 seconds for locks
            "check_same_thread": False,
        }
    return {}


# Create async engine with connection pooling settings for SQLite
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
    connect_args=_connect_args(settings.database_url),
)


def configure_sqlite(dbapi_connection, connection_record):
    """Configure SQLite for better concurrency."""
    # Let SQLAlchemy own transaction boundaries so SAVEPOINT works
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")  # Enable WAL for better concurrency
    cursor.execute("PRAGMA busy_timeout=30000")  # 30 second timeout for busy locks
    cursor.close()


def begin_sqlite(conn):
    conn.exec_driver_sql("BEGIN")


def configure_engine(async_engine) -> None:
    """Attach the SQLite listeners to an engine (no-op for other backends)."""
    if async_engine.dialect.name != "sqlite":
        return
    event.listen(async_engine.sync_engine, "connect", configure_sqlite)
    event.listen(async_engine.sync_engine, "begin", begin_sqlite)


configure_engine(engine)


# Session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """Dependency to get database session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database tables."""
    # Import models so every table is registered on Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how SQLite stores DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
