"""Response schemas for the settings API."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class UserApplications(BaseModel):
    """Applications holding settings for one user."""

    user: str = Field(..., description="Settings owner")
    applications: List[str] = Field(default_factory=list, description="Application keys, sorted")


class ApplicationUsers(BaseModel):
    """Users holding settings for one application."""

    application: str = Field(..., description="Application key")
    users: List[str] = Field(default_factory=list, description="User keys, sorted")


class DeleteResult(BaseModel):
    deleted: int = Field(..., ge=0, description="Number of settings records removed")
