from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Type, TypeVar

from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from user_settings.core.db import build_session_factory, create_settings_engine, init_db
from user_settings.domain.errors import (
    DeserializationFailure,
    SerializationFailure,
    StorageFailure,
)
from user_settings.models import SettingsRecord
from user_settings.models.common import _utcnow


logger = logging.getLogger(__name__)

T = TypeVar("T")


class SettingsStore:
    """Settings persisted as JSON text keyed by (user, application).

    Rules:
    - Save: atomic upsert; at most one row per pair, last writer wins.
    - Load: None when the pair has no row; DeserializationFailure when the
      stored JSON does not fit the requested type.
    - Remove: bulk deletes, zero matches is not an error.

    Every call opens its own session and closes it before returning.
    Database errors surface as StorageFailure with the original chained.
    """

    def __init__(self, session_factory: Callable[[], Session], engine: Optional[Engine] = None) -> None:
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    def from_url(cls, url: str, echo: bool | str = False, create_tables: bool = True) -> "SettingsStore":
        engine = create_settings_engine(url, echo=echo)
        if create_tables:
            init_db(engine)
        return cls(build_session_factory(engine), engine=engine)

    def dispose(self) -> None:
        """Release the connection pool of an engine built by `from_url`."""
        if self._engine is not None:
            self._engine.dispose()

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageFailure(f"{action} failed: {exc}") from exc
        finally:
            db.close()

    # Save / load
    def save(self, value: Any, user: str, application: str, *, type_: Optional[Any] = None) -> None:
        payload = self._encode(value, type_)
        with self._session("save") as db:
            stmt = self._upsert_statement(db.get_bind().dialect.name, user, application, payload)
            if stmt is not None:
                db.execute(stmt)
            else:
                self._find_then_write(db, user, application, payload)
        logger.debug("Saved settings | user=%s application=%s bytes=%d", user, application, len(payload))

    def load(self, type_: Type[T], user: str, application: str) -> Optional[T]:
        payload = self.load_raw(user, application)
        if payload is None:
            return None
        return self.decode(type_, payload, user, application)

    @staticmethod
    def decode(type_: Type[T], payload: str, user: str, application: str) -> T:
        """Decode a stored payload into `type_`."""
        try:
            return TypeAdapter(type_).validate_json(payload, strict=True)
        except ValidationError as exc:
            raise DeserializationFailure(user, application, str(exc)) from exc

    def load_raw(self, user: str, application: str) -> Optional[str]:
        with self._session("load") as db:
            row = (
                db.query(SettingsRecord.payload)
                .filter(SettingsRecord.user == user, SettingsRecord.application == application)
                .one_or_none()
            )
        if row is None:
            logger.debug("No settings | user=%s application=%s", user, application)
            return None
        return row[0]

    # Removal
    def remove_all_for_user(self, user: str) -> int:
        with self._session("remove_all_for_user") as db:
            deleted = (
                db.query(SettingsRecord)
                .filter(SettingsRecord.user == user)
                .delete(synchronize_session=False)
            )
        logger.debug("Removed settings | user=%s deleted=%d", user, deleted)
        return deleted

    def remove_all_for_application(self, application: str) -> int:
        with self._session("remove_all_for_application") as db:
            deleted = (
                db.query(SettingsRecord)
                .filter(SettingsRecord.application == application)
                .delete(synchronize_session=False)
            )
        logger.debug("Removed settings | application=%s deleted=%d", application, deleted)
        return deleted

    def remove_for_user_and_application(self, user: str, application: str) -> int:
        with self._session("remove_for_user_and_application") as db:
            deleted = (
                db.query(SettingsRecord)
                .filter(SettingsRecord.user == user, SettingsRecord.application == application)
                .delete(synchronize_session=False)
            )
        logger.debug("Removed settings | user=%s application=%s deleted=%d", user, application, deleted)
        return deleted

    # Listing
    def applications_for_user(self, user: str) -> List[str]:
        with self._session("applications_for_user") as db:
            rows = (
                db.query(SettingsRecord.application)
                .filter(SettingsRecord.user == user)
                .order_by(SettingsRecord.application.asc())
                .all()
            )
        return [r[0] for r in rows]

    def users_for_application(self, application: str) -> List[str]:
        with self._session("users_for_application") as db:
            rows = (
                db.query(SettingsRecord.user)
                .filter(SettingsRecord.application == application)
                .order_by(SettingsRecord.user.asc())
                .all()
            )
        return [r[0] for r in rows]

    # Internals
    @staticmethod
    def _encode(value: Any, type_: Optional[Any]) -> str:
        try:
            adapter = TypeAdapter(type_ if type_ is not None else type(value))
            return adapter.dump_json(value).decode("utf-8")
        except (PydanticSerializationError, PydanticUserError, TypeError) as exc:
            raise SerializationFailure(
                f"Cannot encode {type(value).__name__} as JSON: {exc}"
            ) from exc

    @staticmethod
    def _upsert_statement(dialect_name: str, user: str, application: str, payload: str):
        """Build a single-statement upsert for dialects that support one.

        Returns None for other dialects.
        """
        now = _utcnow()
        values = {
            "user": user,
            "application": application,
            "payload": payload,
            "created_at": now,
            "updated_at": now,
        }
        if dialect_name in ("sqlite", "postgresql"):
            if dialect_name == "sqlite":
                from sqlalchemy.dialects.sqlite import insert
            else:
                from sqlalchemy.dialects.postgresql import insert
            stmt = insert(SettingsRecord).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=["user", "application"],
                set_={"payload": stmt.excluded.payload, "updated_at": stmt.excluded.updated_at},
            )
        if dialect_name in ("mysql", "mariadb"):
            from sqlalchemy.dialects.mysql import insert

            stmt = insert(SettingsRecord).values(**values)
            return stmt.on_duplicate_key_update(
                payload=stmt.inserted.payload,
                updated_at=stmt.inserted.updated_at,
            )
        return None

    @staticmethod
    def _find_then_write(db: Session, user: str, application: str, payload: str) -> None:
        # A racing insert for the same pair trips the unique constraint at commit
        record = (
            db.query(SettingsRecord)
            .filter(SettingsRecord.user == user, SettingsRecord.application == application)
            .with_for_update()
            .one_or_none()
        )
        if record is None:
            db.add(SettingsRecord(user=user, application=application, payload=payload))
        else:
            record.payload = payload
