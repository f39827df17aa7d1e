"""Database connection and session management."""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from knowledge_assistant.config import settings


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Set SQLite pragmas for better concurrency.

    WAL mode lets conversation logging and retrieval reads proceed while a
    learn or feedback write is in progress.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, enabling WAL for file-backed SQLite."""
    engine = create_async_engine(database_url, echo=echo)
    if database_url.startswith("sqlite") and ":memory:" not in database_url:
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG)

async_session_maker = create_session_maker(engine)


async def init_db(target: AsyncEngine | None = None) -> None:
    """Initialize database and create all tables."""
    from knowledge_assistant.db.models import Base

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
