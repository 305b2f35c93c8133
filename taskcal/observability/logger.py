import os
import time
import json
import logging
from contextlib import contextmanager
from typing import Dict, Any, Optional
from datetime import datetime, timezone

import sentry_sdk

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class TimingContext:
    """Context manager for timing operations."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.duration_ms = (time.time() - self.start_time) * 1000

    def get_duration_ms(self) -> Optional[float]:
        """Get duration in milliseconds."""
        return self.duration_ms


@contextmanager
def timing(operation_name: str):
    """Context manager for timing operations."""
    context = TimingContext(operation_name)
    with context:
        yield context


def log_event(
    action: str,
    collection: str,
    item_id: Optional[str] = None,
    count: Optional[int] = None,
    title: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> None:
    """
    Log a structured store event.

    Args:
        action: The action performed (e.g., 'created', 'deleted', 'synced')
        collection: The collection touched (e.g., 'tasks', 'calendar-events')
        item_id: Optional id of the affected record
        count: Optional size of the collection after the action
        title: Optional record title, truncated before logging
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields to include in the log
    """
    log_entry = {
        "timestamp": _utc_timestamp(),
        "action": action,
        "collection": collection,
    }

    if item_id is not None:
        log_entry["item_id"] = item_id

    if count is not None:
        log_entry["count"] = count

    if title is not None:
        log_entry["title"] = _sanitize_title(title)

    if duration_ms is not None:
        log_entry["duration_ms"] = round(duration_ms, 2)

    log_entry.update(kwargs)

    logger.info(json.dumps(log_entry, separators=(',', ':')))


def _sanitize_title(title: str) -> str:
    """
    Trim a user-supplied title before it goes into a log line.

    Args:
        title: The original title

    Returns:
        Title safe for logging
    """
    if len(title) > 60:
        return title[:57] + "..."
    return title


def init_sentry() -> bool:
    """
    Initialize Sentry if enabled and DSN is provided.

    Returns:
        True if Sentry was initialized, False otherwise
    """
    if not os.getenv("OBS_ENABLED", "false").lower() == "true":
        return False

    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info("Sentry DSN not provided, skipping Sentry initialization")
        return False

    try:
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration

        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[
                FastApiIntegration(),
                LoggingIntegration(
                    level=logging.INFO,
                    event_level=logging.ERROR
                ),
            ],
            traces_sample_rate=0.1,
            environment=os.getenv("ENVIRONMENT", "development"),
        )

        logger.info("Sentry initialized successfully")
        return True

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False


def log_warning(message: str, context: Dict[str, Any] = None) -> None:
    """
    Log a warning with optional context.

    Args:
        message: The warning message
        context: Optional context dictionary
    """
    log_entry = {
        "timestamp": _utc_timestamp(),
        "level": "WARNING",
        "message": message,
    }

    if context:
        log_entry.update(context)

    logger.warning(json.dumps(log_entry, separators=(',', ':')))
