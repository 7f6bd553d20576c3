"""Database configuration and session management.

The connection target comes from the environment:

- `SETTINGS_DATABASE_URL`: any SQLAlchemy URL. Takes precedence when set.
- `SETTINGS_DB_DIR`: directory holding the default SQLite file
  `user_settings.db` (defaults to `/app/db`).

If the SQLite directory is not usable at runtime, the process logs an error and stops.
"""

from typing import Generator
from pathlib import Path
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
import os
from sqlalchemy.orm import Session, sessionmaker, declarative_base

DEFAULT_DB_FILENAME = "user_settings.db"
DEFAULT_DB_DIR = Path("/app/db")

logger = logging.getLogger(__name__)


def _ensure_dir(path: Path) -> tuple[bool, str]:
    try:
        if not path.exists():
            logger.warning("DB dir does not exist: %s. Attempting to create it", path)
        path.mkdir(parents=True, exist_ok=True)
        if not os.access(path, os.W_OK):
            return False, "directory not writable"
        return True, ""
    except Exception as exc:  # pragma: no cover - safety net
        return False, str(exc)


def _build_sqlite_url(db_dir: Path) -> str:
    db_file = db_dir / DEFAULT_DB_FILENAME
    logger.info("DB file path: %s", db_file)
    # `sqlite:///` + absolute path results in four slashes (sqlite:////...) which SQLAlchemy expects
    return f"sqlite:///{db_file.resolve()}"


def _resolve_db_dir() -> Path:
    raw = os.getenv("SETTINGS_DB_DIR", "").strip()
    return Path(raw) if raw else DEFAULT_DB_DIR


def _resolve_database_url() -> str:
    """Resolve the database URL from the environment.

    `SETTINGS_DATABASE_URL` wins when set. Otherwise a SQLite file inside
    `SETTINGS_DB_DIR` is used; the directory is created if needed and must be
    writable, else SystemExit(1).
    """
    url = os.getenv("SETTINGS_DATABASE_URL", "").strip()
    if url:
        return url

    db_dir = _resolve_db_dir()
    ok, reason = _ensure_dir(db_dir)
    if not ok:
        logger.error("Database directory '%s' is not usable: %s", db_dir, reason)
        raise SystemExit(1)
    logger.info("DB path resolved | using_dir=%s", db_dir)
    return _build_sqlite_url(db_dir)


def _resolve_sql_echo() -> bool | str:
    """Resolve SQL echo flag from environment.

    Supports the following values for `LOG_SQL_ECHO`:
    - "" (unset or empty): returns False (no SQL echo)
    - truthy ("1", "true", "yes", "on"): returns True (INFO-level statements)
    - "debug": returns "debug" (DEBUG-level with parameter values)
    Any other value defaults to False.
    """
    raw = os.getenv("LOG_SQL_ECHO", "").strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("debug", "2", "verbose"):
        return "debug"
    return False


def _redact(url: str) -> str:
    from sqlalchemy.engine import make_url

    return make_url(url).render_as_string(hide_password=True)


def create_settings_engine(url: str, echo: bool | str = False) -> Engine:
    """Create an engine for `url`.

    SQLite connections are shared across threads by the session factory, so
    `check_same_thread` is disabled for them.
    """
    connect_args: dict = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, echo=echo)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


_engine: Engine | None = None
SessionLocal: sessionmaker | None = None

# Create base class for models
Base = declarative_base()


def get_engine() -> Engine:
    """Create the process-wide SQLAlchemy engine lazily."""
    global _engine, SessionLocal
    if _engine is not None:
        return _engine

    url = _resolve_database_url()
    logger.info("Database URL: %s", _redact(url))

    _engine = create_settings_engine(url, echo=_resolve_sql_echo())

    # Bind a session factory
    SessionLocal = build_session_factory(_engine)
    return _engine


def get_session_factory() -> sessionmaker:
    if SessionLocal is None:
        get_engine()
        assert SessionLocal is not None
    return SessionLocal


def get_session() -> Generator[Session, None, None]:
    """Get database session."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine | None = None) -> None:
    """Initialize database tables.

    Safety principle: NEVER drop tables automatically in application code.
    This function only attempts to create missing tables.
    """
    # Import models to ensure they are registered with Base
    from user_settings.models import SettingsRecord  # noqa: F401

    logger.info("init_db: creating tables if missing")
    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("init_db: ensured tables exist")
