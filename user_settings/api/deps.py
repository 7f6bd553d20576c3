"""FastAPI dependencies."""

from user_settings.core.db import get_session_factory
from user_settings.services import SettingsStore


def get_store() -> SettingsStore:
    """Settings store bound to the process-wide session factory."""
    return SettingsStore(get_session_factory())
