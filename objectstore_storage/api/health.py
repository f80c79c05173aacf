"""Health check endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.concurrency import run_in_threadpool

from ..core.exceptions import ObjectStoreRequestError

LOGGER = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health/live")
def liveness() -> dict[str, str]:
    """Return a liveness indicator."""

    return {"status": "live"}


@router.get("/health/ready")
async def readiness(request: Request) -> dict[str, str]:
    """Return readiness information, ensuring the bucket is reachable."""

    storage = request.app.state.storage
    try:
        await run_in_threadpool(storage.client.head_bucket)
    except ObjectStoreRequestError as exc:
        LOGGER.warning("object_store_not_ready", bucket=storage.config.bucket, error=str(exc))
        raise HTTPException(status_code=503, detail="Object store unavailable") from exc
    return {"status": "ready"}


@router.get("/metrics")
def metrics() -> Response:
    """Expose Prometheus metrics."""

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
