from __future__ import annotations


class SettingsStoreError(Exception):
    """Base class for settings store failures."""


class StorageFailure(SettingsStoreError):
    """The database was unreachable or a change could not be committed."""


class SerializationFailure(SettingsStoreError):
    """A settings value could not be encoded as JSON."""


class DeserializationFailure(SettingsStoreError):
    """A stored payload is not valid JSON or does not match the requested type."""

    def __init__(self, user: str, application: str, reason: str) -> None:
        super().__init__(
            f"Stored settings for user={user!r} application={application!r} "
            f"could not be decoded: {reason}"
        )
        self.user = user
        self.application = application
        self.reason = reason
