import re
from datetime import date
from typing import Dict, Optional

from taskcal.calendar.types import CATEGORIES, EventDraft
from taskcal.tasks.models import TaskDraft
from taskcal.tasks.utils import parse_date


TITLE_MAX = 100
DESCRIPTION_MAX = 500

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _check_title(title: Optional[str], errors: Dict[str, str]) -> None:
    if not title or not title.strip():
        errors["title"] = "Title is required"
    elif len(title) > TITLE_MAX:
        errors["title"] = f"Title must be less than {TITLE_MAX} characters"


def _check_date(value: Optional[str], field: str, label: str, today: date, errors: Dict[str, str]) -> None:
    if not value:
        errors[field] = f"{label} is required"
        return
    if not _DATE_PATTERN.match(value):
        errors[field] = f"{label} must be in YYYY-MM-DD format"
        return
    try:
        selected = parse_date(value)
    except ValueError:
        errors[field] = f"{label} must be in YYYY-MM-DD format"
        return
    if selected < today:
        errors[field] = f"{label} cannot be in the past"


def _check_times(start: Optional[str], end: Optional[str], errors: Dict[str, str]) -> None:
    if not start:
        errors["startTime"] = "Start time is required"
    elif not _TIME_PATTERN.match(start):
        errors["startTime"] = "Start time must be HH:MM"

    if not end:
        errors["endTime"] = "End time is required"
    elif not _TIME_PATTERN.match(end):
        errors["endTime"] = "End time must be HH:MM"
    elif "startTime" not in errors and end <= start:
        errors["endTime"] = "End time must be after start time"


def validate_task(draft: TaskDraft, today: Optional[date] = None) -> Dict[str, str]:
    """
    Validate a task form submission.

    Returns:
        Mapping of field name to error message; empty when valid
    """
    today = today or date.today()
    errors: Dict[str, str] = {}

    _check_title(draft.title, errors)
    _check_date(draft.due_date, "dueDate", "Due date", today, errors)
    _check_times(draft.start_time, draft.end_time, errors)

    if draft.description and len(draft.description) > DESCRIPTION_MAX:
        errors["description"] = f"Description must be less than {DESCRIPTION_MAX} characters"

    return errors


def validate_event(draft: EventDraft, today: Optional[date] = None) -> Dict[str, str]:
    """Validate an event form submission. Same shape as validate_task."""
    today = today or date.today()
    errors: Dict[str, str] = {}

    _check_title(draft.title, errors)
    _check_date(draft.date, "date", "Date", today, errors)
    _check_times(draft.start_time, draft.end_time, errors)

    if not draft.category:
        errors["category"] = "Category is required"
    elif draft.category not in CATEGORIES:
        errors["category"] = "Invalid category"

    return errors
