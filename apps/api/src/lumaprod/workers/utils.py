"""
Utility functions for Celery workers.

Workers operate outside of the FastAPI request lifecycle, so they need
their own database session management.
"""

import logging
from contextlib import contextmanager
from datetime import UTC, date, datetime
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from lumaprod.core.config import get_settings
from lumaprod.core.database import engine_options

logger = logging.getLogger(__name__)

# =============================================================================
# Database Session Management for Workers
# =============================================================================

# Separate from the FastAPI sessions to avoid sharing connections
_worker_engine = None
_WorkerSessionLocal = None


def _get_worker_engine():
    """Get or create the worker-specific SQLAlchemy engine."""
    global _worker_engine
    if _worker_engine is None:
        settings = get_settings()
        _worker_engine = create_engine(
            settings.database_url,
            **engine_options(settings.database_url, pool_size=3, max_overflow=5),
        )
    return _worker_engine


def _get_worker_session_factory():
    """Get or create the worker session factory."""
    global _WorkerSessionLocal
    if _WorkerSessionLocal is None:
        _WorkerSessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=_get_worker_engine(),
        )
    return _WorkerSessionLocal


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Create a standalone database session for worker tasks.

    Commits on success, rolls back on error, and always closes.

    Example:
        ```python
        with get_db_session() as db:
            AssignmentScheduler(db).auto_assign("2026-11", ContentMode.BIBLE)
        ```
    """
    SessionLocal = _get_worker_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# =============================================================================
# Scheduling Helpers
# =============================================================================


def next_month(today: date | None = None) -> str:
    """``YYYY-MM`` of the month after ``today``."""
    today = today or datetime.now(UTC).date()
    if today.month == 12:
        return f"{today.year + 1}-01"
    return f"{today.year}-{today.month + 1:02d}"


def format_task_result(task: str, success: bool = True, error: str | None = None, **extra: Any) -> dict[str, Any]:
    """Standard task result dictionary."""
    result: dict[str, Any] = {
        "task": task,
        "success": success,
        "completed_at": datetime.now(UTC).isoformat(),
    }
    if error:
        result["error"] = error
    result.update(extra)
    return result


__all__ = [
    "get_db_session",
    "next_month",
    "format_task_result",
]
