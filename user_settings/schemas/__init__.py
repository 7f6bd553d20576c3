"""Pydantic schemas package."""

from .settings import (
    UserApplications,
    ApplicationUsers,
    DeleteResult,
)  # noqa: F401
