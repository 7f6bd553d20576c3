"""Per-user, per-application settings store."""

from user_settings.domain.errors import (  # noqa: F401
    DeserializationFailure,
    SerializationFailure,
    SettingsStoreError,
    StorageFailure,
)
from user_settings.services import SettingsStore  # noqa: F401

__version__ = "0.1.0"
