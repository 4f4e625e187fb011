"""Request-scoped accessors for objects shared by the whole app."""
from __future__ import annotations

from fastapi import FastAPI, Request

from app.config import Settings
from app.services.storage import PhotoStore


def ensure_photo_store(app: FastAPI) -> PhotoStore:
    """Return the app's store, creating it from the app settings on first use."""

    if app.state.photo_store is None:
        store = PhotoStore(app.state.settings)
        store.check_bucket()
        app.state.photo_store = store
    return app.state.photo_store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_photo_store(request: Request) -> PhotoStore:
    return ensure_photo_store(request.app)
