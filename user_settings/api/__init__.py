"""API routers package."""

from . import health, settings  # noqa: F401
