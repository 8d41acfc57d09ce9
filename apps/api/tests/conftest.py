"""
Pytest configuration and fixtures for LumaProd API tests.

Provides a per-test SQLite database, a test client, bearer tokens for
admins and creators, and factory functions for creating test data.
"""

import os
from collections.abc import Callable, Generator
from datetime import date
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Set test environment before importing application
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["HEYGEN_API_KEY"] = "test-heygen-key"
os.environ["PLATFORM_BASE_URL"] = "https://lumaprod.test"

from lumaprod.core.database import get_db
from lumaprod.core.security import create_access_token
from lumaprod.main import app
from lumaprod.models import (
    Base,
    ContentItem,
    ContentMode,
    ContentStatus,
    Creator,
    GenerationLogEntry,
    GenerationStatus,
)
from lumaprod.services.notifications import NotificationDispatcher


@pytest.fixture
def session_factory(tmp_path: Any) -> Generator[sessionmaker, None, None]:
    """
    Session factory bound to a fresh SQLite file.

    A file (rather than an in-memory database) lets several sessions see
    each other's commits, which the concurrency tests rely on.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'lumaprod_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield factory

    engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Provide a database session for each test."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    """Provide a test client whose requests use the test database."""

    def override_get_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def sent_notifications(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, dict[str, Any]]]:
    """
    Record notification tasks instead of sending them to the broker.

    Each entry is (task name, task kwargs).
    """
    sent: list[tuple[str, dict[str, Any]]] = []

    def record(self: NotificationDispatcher, task: Any, **kwargs: Any) -> None:
        sent.append((task.name, kwargs))

    monkeypatch.setattr(NotificationDispatcher, "_enqueue", record)
    return sent


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Authorization headers for an administrator."""
    token = create_access_token(data={"sub": "admin-1", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def creator_headers() -> Callable[[Creator], dict[str, str]]:
    """Build authorization headers for a creator's linked user."""

    def build(creator: Creator) -> dict[str, str]:
        token = create_access_token(data={"sub": creator.user_id, "role": "creator"})
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def make_creator(db: Session) -> Callable[..., Creator]:
    """Factory for committed creators; later calls get higher ids."""
    counter = {"n": 0}

    def build(**overrides: Any) -> Creator:
        counter["n"] += 1
        n = counter["n"]
        values: dict[str, Any] = {
            "user_id": f"user-{n}",
            "name": f"Creator {n}",
            "email": f"creator{n}@example.com",
            "languages": ["en"],
            "monthly_capacity": 15,
            "can_bible": True,
            "can_positivity": True,
            "is_ai": False,
            "active": True,
        }
        values.update(overrides)
        creator = Creator(**values)
        db.add(creator)
        db.commit()
        db.refresh(creator)
        return creator

    return build


@pytest.fixture
def make_ai_creator(make_creator: Callable[..., Creator]) -> Callable[..., Creator]:
    """Factory for AI creators with a single avatar and voice."""

    def build(**overrides: Any) -> Creator:
        values: dict[str, Any] = {
            "is_ai": True,
            "heygen_avatar_id": "avatar-1",
            "heygen_voice_id": "voice-1",
        }
        values.update(overrides)
        return make_creator(**values)

    return build


@pytest.fixture
def make_item(db: Session) -> Callable[..., ContentItem]:
    """Factory for committed content items."""

    def build(
        post_date: date = date(2026, 11, 1),
        mode: ContentMode = ContentMode.BIBLE,
        language: str = "en",
        status: ContentStatus = ContentStatus.GENERATED,
        creator: Creator | None = None,
        **fields: Any,
    ) -> ContentItem:
        fields.setdefault("camera_script", f"Script for {post_date.isoformat()}")
        item = ContentItem(
            post_date=post_date,
            mode=mode,
            language=language,
            status=status,
            creator_id=creator.id if creator is not None else None,
            **fields,
        )
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return build


@pytest.fixture
def make_log_entry(db: Session) -> Callable[..., GenerationLogEntry]:
    """Factory for committed generation log rows."""

    def build(
        item: ContentItem,
        job_id: str | None = None,
        status: GenerationStatus = GenerationStatus.STARTED,
        field: str = "heygen_video",
        **fields: Any,
    ) -> GenerationLogEntry:
        entry = GenerationLogEntry(
            content_item_id=item.id,
            field=field,
            status=status,
            heygen_video_id=job_id,
            **fields,
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    return build
