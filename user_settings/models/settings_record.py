"""Per-user, per-application settings row."""

from __future__ import annotations

from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint

from user_settings.core.db import Base
from .common import _utcnow


class SettingsRecord(Base):
    """One JSON payload per (user, application) pair.

    The payload is opaque to the store; the unique constraint keeps the
    pair a natural key.
    """

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user = Column(String(255), nullable=False, index=True)
    application = Column(String(255), nullable=False, index=True)
    payload = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("user", "application", name="ux_user_settings_user_application"),
    )

    def __repr__(self) -> str:
        return f"<SettingsRecord(id={self.id}, user={self.user!r}, application={self.application!r})>"
