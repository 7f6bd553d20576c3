"""Root conftest for tests directory."""

from __future__ import annotations

from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from user_settings.core.db import Base, build_session_factory
from user_settings.services import SettingsStore


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared across sessions."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # Ensure models are imported
    import user_settings.models  # noqa: F401
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return build_session_factory(engine)


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Provide a test DB session."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def store(session_factory: sessionmaker) -> SettingsStore:
    return SettingsStore(session_factory)
