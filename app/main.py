from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.dependencies import ensure_photo_store
from app.errors import RelayError
from app.handlers import photos_handler, upload_handler
from app.models import HealthStatus
from app.services.storage import PhotoStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None, photo_store: Optional[PhotoStore] = None) -> FastAPI:
    """Build the relay application around an explicit configuration.

    ``photo_store`` is created from ``settings`` on startup, or on the first
    request when the server runs without lifespan events.
    """

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        ensure_photo_store(app)
        logger.info("Wedding Photos Server running on port %s", settings.port)
        logger.info("Photo uploads will be stored in: gs://%s", settings.bucket_name)
        yield

    app = FastAPI(title="Wedding Photos API", lifespan=lifespan)
    app.state.settings = settings
    app.state.photo_store = photo_store

    app.include_router(upload_handler.router)
    app.include_router(photos_handler.router)

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": str(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Server error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": str(exc)},
        )

    @app.get("/api/health", response_model=HealthStatus)
    async def health():
        return HealthStatus()

    return app


app = create_app()
