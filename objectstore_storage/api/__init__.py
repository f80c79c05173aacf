"""Public API routers exposed by the FastAPI application."""

from . import health

__all__ = ["health"]
