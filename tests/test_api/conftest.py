from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from user_settings.main import app
from user_settings.api.deps import get_store
from user_settings.core.db import get_session
from user_settings.services import SettingsStore


@pytest.fixture
def client(
    session_factory: sessionmaker, store: SettingsStore, monkeypatch: pytest.MonkeyPatch
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient bound to the in-memory test database."""

    def override_get_session() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_store] = lambda: store

    # Avoid touching the real database during app startup in tests
    monkeypatch.setattr("user_settings.main.init_db", lambda: None, raising=True)

    with TestClient(app) as test_client:
        yield test_client

    # Cleanup overrides
    app.dependency_overrides.clear()
