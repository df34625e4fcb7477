"""
FastAPI application for the Headless CMS.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .db.base import get_session_local, init_database
from .errors import CMSError
from .logging_config import configure_logging
from .policy.roles import seed_defaults
from .routes import content_router, media_router, roles_router, workflow_router

logger = structlog.get_logger()

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging(settings)
    logger.info("Starting Headless CMS", environment=settings.environment)

    try:
        init_database()
        if settings.seed_defaults:
            db = get_session_local()()
            try:
                created = seed_defaults(db)
            finally:
                db.close()
            logger.info("Default data seeded", **created)
    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        raise

    yield

    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Headless content management backend with field-level permissions and editorial workflow",
    version=importlib.metadata.version("headless-cms"),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CMSError)
async def cms_error_handler(request: Request, exc: CMSError) -> JSONResponse:
    logger.info(
        "request.rejected",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/healthz")
def healthz() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, str]:
    """Return the version of the application."""
    return {"version": importlib.metadata.version("headless-cms")}


app.include_router(content_router)
app.include_router(media_router)
app.include_router(workflow_router)
app.include_router(roles_router)
