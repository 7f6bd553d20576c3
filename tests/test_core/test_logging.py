from __future__ import annotations

import logging

import pytest

from user_settings.core.logging import HealthCheckFilter, setup_logging


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("uvicorn.access", logging.INFO, __file__, 1, message, None, None)


def test_health_check_filter_drops_probe_requests() -> None:
    f = HealthCheckFilter()
    assert f.filter(_record('127.0.0.1 - "GET /health HTTP/1.1" 200')) is False
    assert f.filter(_record('127.0.0.1 - "GET /ready HTTP/1.1" 200')) is False
    assert f.filter(_record('127.0.0.1 - "GET /api/v1/users/u/settings HTTP/1.1" 200')) is True


@pytest.fixture
def restore_levels():
    names = ["", "uvicorn", "uvicorn.error", "sqlalchemy.engine"]
    saved = {n: logging.getLogger(n).level for n in names}
    access = logging.getLogger("uvicorn.access")
    saved_filters = list(access.filters)
    yield
    for n, level in saved.items():
        logging.getLogger(n).setLevel(level)
    access.filters = saved_filters


def test_setup_logging_applies_level_from_env(monkeypatch, restore_levels) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    setup_logging()

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("uvicorn").level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG


def test_setup_logging_keeps_sqlalchemy_quiet_and_filters_once(restore_levels) -> None:
    setup_logging("INFO")
    setup_logging("INFO")

    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    access_filters = [f for f in logging.getLogger("uvicorn.access").filters if isinstance(f, HealthCheckFilter)]
    assert len(access_filters) == 1
