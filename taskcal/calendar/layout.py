"""
Calendar time-grid layout.

Turns a view window into date buckets and places timed events on a 24-hour
vertical axis, packing events that collide into side-by-side columns.
Everything here is pure: events are never mutated and nothing is persisted.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from taskcal.calendar.types import (
    CalendarGrid,
    DayLayout,
    Event,
    EventPlacement,
    ViewWindow,
)


MIN_EVENT_HEIGHT = 40
MONTH_CELL_PREVIEW = 2
TIME_SLOTS: List[str] = [f"{hour:02d}:00" for hour in range(24)]

LAYOUT_STRATEGIES = ("local", "interval")
DIRECTIONS = ("prev", "next")


# --- Date bucketing -------------------------------------------------------

def weekday_index(day: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


def week_dates(day: date) -> List[date]:
    start = day - timedelta(days=weekday_index(day))
    return [start + timedelta(days=i) for i in range(7)]


def day_dates(day: date) -> List[date]:
    return [day]


def days_in_month(day: date) -> int:
    next_month = add_months(day.replace(day=1), 1)
    return (next_month - timedelta(days=1)).day


def month_dates(day: date) -> List[Optional[date]]:
    """
    Month grid cells: one None per weekday before the 1st, then every day.

    The grid is not padded at the end, so its length varies by month.
    """
    first = day.replace(day=1)
    cells: List[Optional[date]] = [None] * weekday_index(first)
    cells.extend(first + timedelta(days=i) for i in range(days_in_month(first)))
    return cells


def visible_dates(window: ViewWindow) -> List[Optional[date]]:
    if window.granularity == "day":
        return list(day_dates(window.reference))
    if window.granularity == "week":
        return list(week_dates(window.reference))
    return month_dates(window.reference)


def add_months(day: date, months: int) -> date:
    """
    Move by whole calendar months, letting day-of-month overflow roll forward.

    Jan 31 + 1 month is Mar 3 (Mar 2 in leap years), not Feb 28.
    """
    total = day.year * 12 + (day.month - 1) + months
    year, month_index = divmod(total, 12)
    return date(year, month_index + 1, 1) + timedelta(days=day.day - 1)


def shift(reference: date, granularity: str, direction: str) -> date:
    """Step the reference date one unit of the granularity in either direction."""
    if direction not in DIRECTIONS:
        raise ValueError(f"Unsupported direction: {direction}")
    sign = 1 if direction == "next" else -1

    if granularity == "day":
        return reference + timedelta(days=sign)
    if granularity == "week":
        return reference + timedelta(days=7 * sign)
    if granularity == "month":
        return add_months(reference, sign)
    raise ValueError(f"Unsupported granularity: {granularity}")


def step(window: ViewWindow, direction: str) -> ViewWindow:
    return ViewWindow(
        reference=shift(window.reference, window.granularity, direction),
        granularity=window.granularity,
    )


# --- Event-to-bucket assignment -------------------------------------------

def events_for_date(events: Iterable[Event], day: Optional[date]) -> List[Event]:
    if day is None:
        return []
    key = day.isoformat()
    return [event for event in events if event.date == key]


def group_events_by_date(events: Iterable[Event]) -> Dict[str, List[Event]]:
    """Bucket events by date string once per render, keeping source order."""
    grouped: Dict[str, List[Event]] = {}
    for event in events:
        grouped.setdefault(event.date, []).append(event)
    return grouped


# --- Time-slot vertical mapping -------------------------------------------

def to_minutes(value: str) -> int:
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def _hour(value: str) -> int:
    return int(value.split(":")[0])


def event_position(event: Event) -> int:
    """Top offset in minutes from midnight."""
    return to_minutes(event.start_time)


def event_duration(event: Event) -> int:
    """Raw duration in minutes; zero or negative for malformed ranges."""
    return to_minutes(event.end_time) - to_minutes(event.start_time)


def event_height(event: Event, min_height: int = MIN_EVENT_HEIGHT) -> int:
    return max(event_duration(event), min_height)


def occupies_slot(event: Event, slot_hour: int) -> bool:
    """
    Whether the event is drawn in the given hour row.

    Inclusive: an event ending exactly on the hour still occupies that row.
    """
    start_hour = _hour(event.start_time)
    if start_hour == slot_hour:
        return True
    return start_hour < slot_hour and _hour(event.end_time) >= slot_hour


# --- Overlap column packing -----------------------------------------------

def overlaps(event: Event, other: Event) -> bool:
    # Inclusive on both ends, so back-to-back events are grouped together.
    return (
        other.date == event.date
        and other.start_time <= event.end_time
        and other.end_time >= event.start_time
    )


def overlap_group(event: Event, candidates: Sequence[Event]) -> List[Event]:
    """Candidates the event collides with (itself included), in source order."""
    return [other for other in candidates if overlaps(event, other)]


def _index_of(event_id: str, events: Sequence[Event]) -> int:
    for index, other in enumerate(events):
        if other.id == event_id:
            return index
    return -1


def place_event(
    event: Event,
    group: Sequence[Event],
    z_index: int = 1,
    min_height: int = MIN_EVENT_HEIGHT,
) -> EventPlacement:
    column_count = max(1, len(group))
    column = _index_of(event.id, group)
    if column < 0:
        # Inverted ranges never match their own group; draw them full width.
        column, column_count = 0, 1

    width = 100 / column_count
    return EventPlacement(
        event_id=event.id,
        top=event_position(event),
        height=event_height(event, min_height),
        duration=event_duration(event),
        left_percent=column * width,
        width_percent=width,
        column=column,
        column_count=column_count,
        z_index=z_index,
    )


def _pack_local(day_events: Sequence[Event], min_height: int) -> List[EventPlacement]:
    placements = []
    for event in day_events:
        group = overlap_group(event, day_events)
        z_index = _index_of(event.id, day_events) + 1
        placements.append(place_event(event, group, z_index, min_height))
    return placements


def _pack_interval(day_events: Sequence[Event], min_height: int) -> List[EventPlacement]:
    """
    Greedy interval-graph colouring over the drawn extent of each event.

    Events are visited by start time and take the lowest column whose last
    event has ended. A cluster of transitively colliding events shares one
    column count.
    """
    extents = [
        (event_position(event), event_position(event) + event_height(event, min_height))
        for event in day_events
    ]
    order = sorted(range(len(day_events)), key=lambda i: extents[i])

    columns = [0] * len(day_events)
    counts = [1] * len(day_events)
    cluster: List[int] = []
    column_ends: List[int] = []
    cluster_end = 0

    for index in order:
        start, end = extents[index]
        if cluster and start >= cluster_end:
            for member in cluster:
                counts[member] = len(column_ends)
            cluster, column_ends = [], []

        for column, column_end in enumerate(column_ends):
            if column_end <= start:
                column_ends[column] = end
                columns[index] = column
                break
        else:
            column_ends.append(end)
            columns[index] = len(column_ends) - 1

        cluster.append(index)
        cluster_end = max(cluster_end, end) if len(cluster) > 1 else end

    for member in cluster:
        counts[member] = len(column_ends)

    placements = []
    for index, event in enumerate(day_events):
        width = 100 / counts[index]
        placements.append(EventPlacement(
            event_id=event.id,
            top=extents[index][0],
            height=extents[index][1] - extents[index][0],
            duration=event_duration(event),
            left_percent=columns[index] * width,
            width_percent=width,
            column=columns[index],
            column_count=counts[index],
            z_index=index + 1,
        ))
    return placements


def layout_day(
    day_events: Sequence[Event],
    strategy: str = "local",
    min_height: int = MIN_EVENT_HEIGHT,
) -> List[EventPlacement]:
    """
    Place one bucket's events, returning placements in source order.

    "local" recomputes each event's collision group on its own and orders
    columns by source position. "interval" packs the whole day at once so
    every colliding event agrees on the column count.
    """
    if strategy == "local":
        return _pack_local(day_events, min_height)
    if strategy == "interval":
        return _pack_interval(day_events, min_height)
    raise ValueError(f"Unsupported layout strategy: {strategy}")


def layout_slot(
    day_events: Sequence[Event],
    slot_hour: int,
    strategy: str = "local",
    min_height: int = MIN_EVENT_HEIGHT,
) -> List[EventPlacement]:
    """Placements drawn in one hour row; long events repeat in every row they cross."""
    placements = layout_day(day_events, strategy, min_height)
    return [
        placement
        for event, placement in zip(day_events, placements)
        if occupies_slot(event, slot_hour)
    ]


def layout_view(
    events: Sequence[Event],
    window: ViewWindow,
    strategy: str = "local",
    min_height: int = MIN_EVENT_HEIGHT,
) -> CalendarGrid:
    dates = visible_dates(window)
    by_date = group_events_by_date(events)

    days: List[DayLayout] = []
    for day in dates:
        if day is None:
            continue
        key = day.isoformat()
        day_events = by_date.get(key, [])
        if window.granularity == "month":
            shown = day_events[:MONTH_CELL_PREVIEW]
            days.append(DayLayout(date=key, events=shown, overflow=len(day_events) - len(shown)))
        else:
            days.append(DayLayout(
                date=key,
                events=day_events,
                placements=layout_day(day_events, strategy, min_height),
            ))

    return CalendarGrid(
        reference=window.reference.isoformat(),
        granularity=window.granularity,
        buckets=[day.isoformat() if day else None for day in dates],
        days=days,
    )
