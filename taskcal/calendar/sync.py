from typing import Dict, Iterable, List, Optional

from taskcal.calendar.types import CATEGORIES, Event
from taskcal.tasks.models import Task


DEFAULT_START = "09:00"
DEFAULT_END = "10:00"


def project_task(task: Task, existing: Optional[Event] = None) -> Event:
    """
    Calendar event for a task with a due date.

    The event shares the task's id. Attendees only exist on the calendar
    side, so they are carried over from any existing event.
    """
    category = task.category if task.category in CATEGORIES else "work"
    return Event(
        id=task.id,
        title=task.title,
        description=task.description,
        date=task.due_date,
        start_time=task.start_time or DEFAULT_START,
        end_time=task.end_time or DEFAULT_END,
        category=category,
        attendees=existing.attendees if existing else None,
    )


def reconcile_events(
    tasks: Iterable[Task],
    events: Iterable[Event],
    previous_task_ids: Optional[Iterable[str]] = None,
) -> List[Event]:
    """
    Merge the task list into the event list, keyed by shared id.

    Args:
        tasks: Current tasks, in display order
        events: Current events, in store order
        previous_task_ids: Task ids before the change; events backed by one of
            these that no longer project are dropped

    Returns:
        New event list; inputs are not modified
    """
    projected: Dict[str, Task] = {task.id: task for task in tasks if task.due_date}
    formerly_backed = set(previous_task_ids or ())

    result: List[Event] = []
    seen = set()
    for event in events:
        task = projected.get(event.id)
        if task is not None:
            result.append(project_task(task, event))
            seen.add(event.id)
        elif event.id not in formerly_backed:
            result.append(event)

    for task_id, task in projected.items():
        if task_id not in seen:
            result.append(project_task(task))
    return result
