"""
FastAPI application entry point for the dashboard API.
"""

from __future__ import annotations

from fastapi import FastAPI

from backend.config import get_settings
from backend.routes import public_router, router


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Pickle Glass API (FastAPI)", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(public_router)
    return app


app = create_app()
