"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, user identification,
error handlers, routers, and the health endpoint. The module-level ``app``
instance allows ``uvicorn src.api.app:app --reload``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.auth import UserHeaderMiddleware
from src.api.middleware.error_handler import register_error_handlers
from src.api.routes import notes, recording, transcription, translation, workspaces
from src.core.config import get_settings
from src.core.models import HealthResponse
from src.services.storage.database import close_db, init_db

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    Startup: initialize the async SQLite database (create tables if needed).
    Shutdown: dispose the DB engine.
    """
    await init_db()
    logger.info("BakBak API started")
    yield
    await close_db()


def create_app() -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Returns:
        FastAPI: The configured application, ready for ``uvicorn``.
    """
    configure_logging()

    app = FastAPI(
        title="BakBak",
        description="Record or upload audio, transcribe it, and translate "
        "or romanize the transcript.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # -- CORS --
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- User identification --
    app.add_middleware(UserHeaderMiddleware)

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check (root-level, not under /api/v1) --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(recording.router, prefix="/api/v1")
    app.include_router(transcription.router, prefix="/api/v1")
    app.include_router(translation.router, prefix="/api/v1")
    app.include_router(notes.router, prefix="/api/v1")
    app.include_router(workspaces.router, prefix="/api/v1")

    return app


app = create_app()
