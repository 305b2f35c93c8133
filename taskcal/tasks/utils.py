import secrets
import string
from datetime import date, datetime
from typing import Optional


_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """Short random base-36 identifier (9 chars)."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


def parse_date(value: str) -> date:
    """Date part of an ISO date or datetime string."""
    return date.fromisoformat(value[:10])


def format_date(value: str) -> str:
    """'2025-07-22' -> 'Jul 22, 2025'."""
    day = parse_date(value)
    return f"{day.strftime('%b')} {day.day}, {day.year}"


def is_overdue(due_date: Optional[str], today: Optional[date] = None) -> bool:
    """
    Whether a due date lies strictly before today, comparing dates only.

    Empty, missing or unreadable due dates are never overdue.
    """
    if not due_date:
        return False
    try:
        due = parse_date(due_date)
    except ValueError:
        return False
    return due < (today or date.today())


def now_iso() -> str:
    return datetime.now().isoformat(timespec="milliseconds")
