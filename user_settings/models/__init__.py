"""SQLAlchemy models package."""

from .settings_record import SettingsRecord  # noqa: F401
