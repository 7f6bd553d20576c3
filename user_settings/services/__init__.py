"""Service layer.

Exposes:
- SettingsStore
"""

from .settings_store import SettingsStore

__all__ = [
    "SettingsStore",
]
