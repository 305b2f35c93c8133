import os
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taskcal.storage.store import get_store

router = APIRouter()

# Global state for last sync tracking
_last_sync: Optional[Dict[str, Any]] = None


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def update_last_sync(event_count: int, duration_ms: Optional[float] = None) -> None:
    """
    Record the last task-to-event reconciliation.

    Args:
        event_count: Number of events after the sync
        duration_ms: Optional duration in milliseconds
    """
    global _last_sync

    _last_sync = {
        "time": _now(),
        "event_count": event_count,
    }

    if duration_ms is not None:
        _last_sync["duration_ms"] = round(duration_ms, 2)


def get_last_sync() -> Optional[Dict[str, Any]]:
    """Get the last sync information."""
    return _last_sync


@router.get("/healthz")
async def health_check() -> JSONResponse:
    """
    Health check endpoint with last sync information.

    Returns:
        JSON response with status and last sync metadata
    """
    response = {
        "status": "ok",
        "timestamp": _now(),
    }

    last_sync = get_last_sync()
    if last_sync:
        response["last_sync"] = last_sync

    obs_enabled = os.getenv("OBS_ENABLED", "false").lower() == "true"
    response["observability"] = {
        "enabled": obs_enabled,
        "sentry_configured": bool(os.getenv("SENTRY_DSN")),
    }

    return JSONResponse(status_code=200, content=response)


@router.get("/healthz/ready")
async def readiness_check() -> JSONResponse:
    """
    Readiness check: the data directory must be writable.

    Returns:
        JSON response indicating if the service is ready to accept traffic
    """
    try:
        data_dir = get_store().data_dir
        storage_ok = data_dir.is_dir() and os.access(data_dir, os.W_OK)
    except OSError:
        storage_ok = False

    checks = {"storage": "ok" if storage_ok else "unavailable"}
    all_healthy = all(status == "ok" for status in checks.values())

    response = {
        "status": "ready" if all_healthy else "not_ready",
        "timestamp": _now(),
        "checks": checks,
    }

    status_code = 200 if all_healthy else 503
    return JSONResponse(status_code=status_code, content=response)


@router.get("/healthz/live")
async def liveness_check() -> JSONResponse:
    """Liveness check endpoint."""
    return JSONResponse(status_code=200, content={"status": "alive", "timestamp": _now()})
