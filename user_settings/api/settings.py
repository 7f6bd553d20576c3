"""Settings API routers.

User-scoped routes live under `/users/{user}/settings`, application-scoped
bulk routes under `/applications/{application}/settings`. Stored values are
arbitrary JSON and are returned verbatim.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status, Response

from user_settings.api.deps import get_store
from user_settings.domain.errors import DeserializationFailure, StorageFailure
from user_settings.schemas import ApplicationUsers, DeleteResult, UserApplications
from user_settings.services import SettingsStore


users_router = APIRouter(prefix="/users/{user}/settings", tags=["settings"])
applications_router = APIRouter(prefix="/applications/{application}/settings", tags=["settings"])


def _storage_unavailable(exc: StorageFailure) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


async def _json_body(request: Request) -> Any:
    """The raw JSON request body, where `null` is a value like any other."""
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Request body must be JSON")


@users_router.get("", response_model=UserApplications)
def list_user_applications(user: str, store: SettingsStore = Depends(get_store)) -> UserApplications:
    try:
        applications = store.applications_for_user(user)
    except StorageFailure as exc:
        raise _storage_unavailable(exc)
    return UserApplications(user=user, applications=applications)


@users_router.delete("", response_model=DeleteResult)
def delete_user_settings(user: str, store: SettingsStore = Depends(get_store)) -> DeleteResult:
    """Remove the settings of every application for `user`."""
    try:
        deleted = store.remove_all_for_user(user)
    except StorageFailure as exc:
        raise _storage_unavailable(exc)
    return DeleteResult(deleted=deleted)


@users_router.get("/{application}")
def get_settings(user: str, application: str, store: SettingsStore = Depends(get_store)) -> Response:
    try:
        payload = store.load_raw(user, application)
    except StorageFailure as exc:
        raise _storage_unavailable(exc)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Settings not found")
    # Validate before echoing so a corrupt row is reported instead of served
    try:
        store.decode(Any, payload, user, application)
    except DeserializationFailure as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return Response(content=payload, media_type="application/json")


@users_router.put("/{application}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def put_settings(
    user: str,
    application: str,
    value: Any = Depends(_json_body),
    store: SettingsStore = Depends(get_store),
) -> Response:
    """Create or replace the settings for (user, application)."""
    try:
        store.save(value, user, application, type_=Any)
    except StorageFailure as exc:
        raise _storage_unavailable(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@users_router.delete("/{application}", response_model=DeleteResult)
def delete_settings(user: str, application: str, store: SettingsStore = Depends(get_store)) -> DeleteResult:
    try:
        deleted = store.remove_for_user_and_application(user, application)
    except StorageFailure as exc:
        raise _storage_unavailable(exc)
    return DeleteResult(deleted=deleted)


@applications_router.get("", response_model=ApplicationUsers)
def list_application_users(application: str, store: SettingsStore = Depends(get_store)) -> ApplicationUsers:
    try:
        users = store.users_for_application(application)
    except StorageFailure as exc:
        raise _storage_unavailable(exc)
    return ApplicationUsers(application=application, users=users)


@applications_router.delete("", response_model=DeleteResult)
def delete_application_settings(application: str, store: SettingsStore = Depends(get_store)) -> DeleteResult:
    """Remove the settings of every user for `application`."""
    try:
        deleted = store.remove_all_for_application(application)
    except StorageFailure as exc:
        raise _storage_unavailable(exc)
    return DeleteResult(deleted=deleted)
