"""Pytest configuration and fixtures for beatstore tests."""

from collections.abc import Callable, Generator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from beatstore.api.deps import get_db
from beatstore.core.config import get_settings
from beatstore.main import app
from beatstore.models.base import Base
from beatstore.models.beat import Beat
from beatstore.models.user import User, UserRole
from beatstore.services.beat import create_beat

# Use SQLite in-memory for tests (fast, isolated)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close the session here, let the db fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def no_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable every read-through cache for the test."""
    settings = get_settings()
    monkeypatch.setattr(settings, "search_cache_seconds", 0)
    monkeypatch.setattr(settings, "autocomplete_cache_seconds", 0)
    monkeypatch.setattr(settings, "trending_cache_seconds", 0)


@pytest.fixture
def producer(db: Session) -> User:
    """Create a producer with a display name."""
    user = User(
        username="metrobeats",
        first_name="Metro",
        last_name="Booming",
        role=UserRole.PRODUCER.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_producer(db: Session) -> User:
    user = User(username="lofiluna", role=UserRole.BOTH.value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_beat(db: Session, producer: User) -> Callable[..., Beat]:
    """Factory for catalog beats with sensible defaults."""

    def _make(
        title: str = "Test Beat",
        bpm: int = 90,
        genre: str = "Hip Hop",
        mood: str = "Dark",
        key: str = "Am",
        price: str = "25.00",
        tags: list[str] | None = None,
        owner: User | None = None,
        created_at: datetime | None = None,
        play_count: int | None = None,
        like_count: int | None = None,
        **kwargs,
    ) -> Beat:
        beat = create_beat(
            db,
            owner or producer,
            title=title,
            bpm=bpm,
            key=key,
            genre=genre,
            mood=mood,
            price=price,
            tags=tags,
            **kwargs,
        )
        if created_at is not None:
            beat.created_at = created_at
        if play_count is not None:
            beat.play_count = play_count
        if like_count is not None:
            beat.like_count = like_count
        db.commit()
        db.refresh(beat)
        return beat

    return _make
