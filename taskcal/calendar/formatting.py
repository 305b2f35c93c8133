from typing import Dict, Iterable

from taskcal.calendar.layout import weekday_index
from taskcal.calendar.types import CATEGORIES, Event, ViewWindow


MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
WEEK_DAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def format_time(value: str) -> str:
    """Render a 24h 'HH:MM' string as '9:30 AM'."""
    hours, minutes = value.split(":")[:2]
    hour = int(hours)
    ampm = "PM" if hour >= 12 else "AM"
    display_hour = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    return f"{display_hour}:{minutes} {ampm}"


def view_title(window: ViewWindow) -> str:
    ref = window.reference
    if window.granularity == "month":
        return f"{MONTHS[ref.month - 1]} {ref.year}"
    return f"{WEEK_DAYS[weekday_index(ref)]}, {ref.day} {MONTHS[ref.month - 1]} {ref.year}"


def category_counts(events: Iterable[Event]) -> Dict[str, int]:
    """Legend counts per category; every category is present even when zero."""
    counts = {category: 0 for category in CATEGORIES}
    for event in events:
        counts[event.category] = counts.get(event.category, 0) + 1
    return counts
