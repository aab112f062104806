"""
Database connection settings for the outpass workflow.
Provides SQLAlchemy engine initialisation and session management.
"""

import sqlite3
import time
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from outpass.config.logging import get_logger
from outpass.config.settings import get_settings

logger = get_logger(__name__)

# Module-level engine and session factory
_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None


def init_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Initialise the SQLAlchemy engine and session factory.

    SQLite URLs get `check_same_thread=False`; in-memory SQLite additionally
    uses a StaticPool so every session sees the same database.

    Args:
        database_url: SQLAlchemy URL, defaults to settings.DATABASE_URL
        echo: Log SQL statements, defaults to settings.DATABASE_ECHO

    Returns:
        SQLAlchemy Engine instance
    """
    global _engine, _SessionFactory

    settings = get_settings()
    url = database_url or settings.DATABASE_URL
    echo = settings.DATABASE_ECHO if echo is None else echo

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs = {
            "pool_pre_ping": True,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_POOL_OVERFLOW,
            "pool_recycle": 3600,
        }

    _engine = create_engine(url, echo=echo, **kwargs)
    _SessionFactory = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)

    logger.info("Database engine initialised", extra={"dialect": _engine.dialect.name})
    return _engine


def get_engine() -> Engine:
    """
    Get the current engine instance.

    Raises:
        RuntimeError: If engine has not been initialised.
    """
    if _engine is None:
        raise RuntimeError("Engine not initialised. Call init_engine() first.")
    return _engine


def get_session() -> Session:
    """Get a new session bound to the current engine."""
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialised. Call init_engine() first.")
    return _SessionFactory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Context manager for database sessions"""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception as e:
        logger.error(f"Database context error: {str(e)}")
        session.rollback()
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create all tables and register ORM immutability listeners."""
    from outpass.models import Base
    from outpass.models.immutability import register_immutability_listeners

    Base.metadata.create_all(bind=get_engine())
    register_immutability_listeners()


def drop_tables() -> None:
    from outpass.models import Base

    Base.metadata.drop_all(bind=get_engine())


def reset_engine() -> None:
    """Dispose the engine; used between test runs."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@event.listens_for(Engine, "before_cursor_execute")
def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Log query execution time - start timer"""
    conn.info.setdefault('query_start_time', []).append(time.time())


@event.listens_for(Engine, "after_cursor_execute")
def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Log query execution time - stop timer and log if slow query"""
    total_time = time.time() - conn.info['query_start_time'].pop()

    if total_time > 0.5:
        logger.warning(
            f"Slow query detected ({total_time:.4f}s): {statement[:100]}..."
        )


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores foreign keys unless asked per connection"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
