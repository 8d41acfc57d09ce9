"""
Database configuration and session management.

This module provides SQLAlchemy engine configuration, session factory,
and dependency injection for database sessions in FastAPI.
"""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from lumaprod.core.config import get_settings
from lumaprod.models.base import Base


def engine_options(database_url: str, pool_size: int = 5, max_overflow: int = 10) -> dict[str, Any]:
    """
    Build engine keyword arguments appropriate for the database backend.

    SQLite (used by the test suite) does not take the pool sizing options
    used for PostgreSQL.

    Args:
        database_url: SQLAlchemy connection string
        pool_size: Pooled connections (PostgreSQL only)
        max_overflow: Extra connections above the pool (PostgreSQL only)

    Returns:
        Keyword arguments for ``create_engine``
    """
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    return {
        "pool_pre_ping": True,  # Test connections before using
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_recycle": 3600,  # Recycle connections after 1 hour
    }


def create_db_engine(database_url: str | None = None) -> Any:
    """
    Create SQLAlchemy engine with appropriate configuration.

    Args:
        database_url: Optional database URL override. If not provided,
                     uses the URL from settings.

    Returns:
        SQLAlchemy engine instance
    """
    settings = get_settings()
    url = database_url or settings.database_url

    engine_kwargs = engine_options(url)

    # Add echo for development debugging
    if settings.debug:
        engine_kwargs["echo"] = True

    return create_engine(url, **engine_kwargs)


# Global engine instance
engine = create_db_engine()

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency injection function for database sessions.

    Yields a database session and ensures it is properly closed
    after the request is complete.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
