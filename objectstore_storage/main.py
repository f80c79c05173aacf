"""Entrypoint for the FastAPI application."""

from __future__ import annotations

from fastapi import FastAPI

from .api import health
from .core.config import get_settings
from .core.logging import configure_logging
from .services.storage import ObjectStoreStorage


def create_app(storage: ObjectStoreStorage | None = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    storage = storage or ObjectStoreStorage.from_settings(settings)

    app = FastAPI(title="Object Store Media", version="0.1.0")
    app.state.storage = storage

    app.include_router(health.router)

    prefix = storage.config.static_file_url_prefix.strip("/")
    route_path = f"/{prefix}/{{path:path}}" if prefix else "/{path:path}"
    app.add_route(route_path, storage.serve(), methods=["GET"])

    return app


app = create_app()
