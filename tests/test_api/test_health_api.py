from __future__ import annotations

from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from user_settings.core.db import get_session
from user_settings.main import app


def test_health_and_ready(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}

    r = client.get("/ready")
    assert r.status_code == 200
    assert r.json() == {"status": "ready"}


def test_ready_reports_unreachable_database(client: TestClient, tmp_path) -> None:
    # Parent directory does not exist, so SQLite cannot open the file
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
    factory = sessionmaker(bind=engine)

    def broken_session() -> Generator[Session, None, None]:
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_session] = broken_session

    r = client.get("/ready")
    assert r.status_code == 503
    assert "database unavailable" in r.json()["detail"]


def test_root_redirects_to_docs(client: TestClient) -> None:
    r = client.get("/", follow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"] == "/api/docs"
