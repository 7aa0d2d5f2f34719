"""Database configuration and base models"""

import logging
from pathlib import Path
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger("portal.models.database")


class Base(DeclarativeBase):
    """Base class for all database models"""

    pass


engine = None
async_session_maker = None


def init_database(database_url: str, echo: bool = False):
    """
    Initialize database engine and session maker.

    Args:
        database_url: SQLAlchemy database URL
        echo: Log emitted SQL
    """
    global engine, async_session_maker

    if database_url.startswith("sqlite:///"):
        db_path = database_url.replace("sqlite:///", "")
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        # Convert sqlite:/// to sqlite+aiosqlite:///
        async_db_url = database_url.replace("sqlite:///", "sqlite+aiosqlite:///")
    elif database_url.startswith("postgresql://"):
        async_db_url = database_url.replace("postgresql://", "postgresql+asyncpg://")
    else:
        async_db_url = database_url

    engine = create_async_engine(
        async_db_url,
        echo=echo,
        future=True,
        pool_pre_ping=True,
    )

    if "sqlite" in async_db_url:

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            """Set SQLite pragmas for better performance"""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=30000")  # 30 seconds
            cursor.close()

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    logger.info(f"Database initialized with URL: {database_url}")


def get_session_maker() -> async_sessionmaker:
    """Return the session factory, failing if the database is not initialized"""
    if async_session_maker is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return async_session_maker


async def init_db():
    """Initialize database (create tables)"""
    if engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema initialized")


async def close_db():
    """Close database connections"""
    if engine is not None:
        await engine.dispose()
        logger.info("Database connections closed")
