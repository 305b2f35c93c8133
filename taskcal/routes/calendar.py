import re
from datetime import date, datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from taskcal.calendar.formatting import category_counts, view_title
from taskcal.calendar.layout import (
    TIME_SLOTS,
    events_for_date,
    layout_slot,
    layout_view,
    step,
)
from taskcal.calendar.types import ViewWindow
from taskcal.core.config import load_config
from taskcal.observability.logger import timing
from taskcal.routes.auth import require_api_key_if_configured
from taskcal.tasks.service import synced_event_store


router = APIRouter(dependencies=[Depends(require_api_key_if_configured)])


def _parse_date(date_str: Optional[str]) -> date:
    """
    Parse a YYYY-MM-DD query value, defaulting to today.

    Raises HTTPException(422) for anything that is not a real calendar date.
    """
    if date_str is None:
        return date.today()

    detail = f"Invalid date format: '{date_str}'. Expected format: YYYY-MM-DD (e.g., 2025-07-22)"
    if not re.match(r'^\d{4}-\d{2}-\d{2}$', date_str):
        raise HTTPException(status_code=422, detail=detail)
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=422, detail=detail)


def _window(date_str: Optional[str], view: Optional[str]) -> ViewWindow:
    return ViewWindow(
        reference=_parse_date(date_str),
        granularity=view or load_config().default_view,
    )


@router.get("/view")
async def calendar_view(
    date: Optional[str] = Query(None, description="Reference date (YYYY-MM-DD). Defaults to today."),
    view: Optional[Literal["day", "week", "month"]] = Query(None, description="Granularity; defaults to DEFAULT_VIEW"),
    strategy: Optional[Literal["local", "interval"]] = Query(None, description="Column packing; defaults to LAYOUT_STRATEGY"),
) -> JSONResponse:
    """
    Visible buckets for the window plus placement geometry for each day.
    """
    cfg = load_config()
    window = _window(date, view)
    events = synced_event_store().list()

    with timing("layout_view") as t:
        grid = layout_view(events, window, strategy or cfg.layout_strategy, cfg.min_event_height)

    content = {
        "title": view_title(window),
        "time_slots": TIME_SLOTS,
        "category_counts": category_counts(events),
        **grid.model_dump(by_alias=True),
        "duration_ms": round(t.get_duration_ms() or 0.0, 2),
    }
    return JSONResponse(status_code=200, content=content)


@router.get("/navigate")
async def calendar_navigate(
    direction: Literal["prev", "next"] = Query(..., description="Step direction"),
    date: Optional[str] = Query(None, description="Current reference date (YYYY-MM-DD)"),
    view: Optional[Literal["day", "week", "month"]] = Query(None, description="Granularity"),
) -> JSONResponse:
    """Step one day, week or month; month steps let day-of-month overflow roll forward."""
    window = step(_window(date, view), direction)
    return JSONResponse(
        status_code=200,
        content={
            "date": window.reference.isoformat(),
            "view": window.granularity,
            "title": view_title(window),
        },
    )


@router.get("/slot")
async def calendar_slot(
    hour: int = Query(..., ge=0, le=23, description="Hour row (0-23)"),
    date: Optional[str] = Query(None, description="Day (YYYY-MM-DD)"),
    strategy: Optional[Literal["local", "interval"]] = Query(None),
) -> JSONResponse:
    """Events drawn in one hour row of one day."""
    cfg = load_config()
    day = _parse_date(date)
    day_events = events_for_date(synced_event_store().list(), day)
    placements = layout_slot(day_events, hour, strategy or cfg.layout_strategy, cfg.min_event_height)
    return JSONResponse(
        status_code=200,
        content={
            "date": day.isoformat(),
            "time": TIME_SLOTS[hour],
            "placements": [placement.model_dump() for placement in placements],
        },
    )
