"""Main FastAPI application for the user settings store."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
import logging
from fastapi.responses import RedirectResponse

from user_settings.core.db import init_db
from user_settings.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    logger = logging.getLogger(__name__)
    init_db()
    logger.info("Settings store ready")
    yield


app = FastAPI(
    title="User Settings API",
    description="Per-user, per-application settings store",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

from user_settings.api import health, settings

# Mount health endpoints unversioned for infra probes (/health, /ready)
app.include_router(health.router)

app.include_router(settings.users_router, prefix="/api/v1")
app.include_router(settings.applications_router, prefix="/api/v1")


@app.get("/")
async def root() -> RedirectResponse:
    """Redirect root to Swagger UI."""
    return RedirectResponse(url="/api/docs")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
