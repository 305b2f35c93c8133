from datetime import date
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from taskcal.calendar.store import EventStore, select_event_store
from taskcal.calendar.sync import reconcile_events
from taskcal.observability.logger import log_event, log_warning, timing
from taskcal.routes.health import update_last_sync
from taskcal.storage.store import get_store
from taskcal.tasks.models import Task, TaskDraft, TaskStats
from taskcal.tasks.utils import generate_id, is_overdue, now_iso


TASKS_KEY = "tasks"
FILTERS = ("all", "pending", "completed", "overdue")

T = TypeVar("T")


def move_item(items: Sequence[T], old_index: int, new_index: int) -> List[T]:
    """Copy of items with the element at old_index moved to new_index."""
    result = list(items)
    result.insert(new_index, result.pop(old_index))
    return result


def filter_tasks(
    tasks: Sequence[Task],
    status_filter: str = "all",
    search: str = "",
    today: Optional[date] = None,
) -> List[Task]:
    """
    Apply the search box and the status filter.

    Search is a case-insensitive substring match on title or description.
    'overdue' means past due and not completed.
    """
    if status_filter not in FILTERS:
        raise ValueError(f"Unsupported filter: {status_filter}")

    filtered = list(tasks)
    if search.strip():
        needle = search.lower()
        filtered = [
            task for task in filtered
            if needle in task.title.lower() or needle in (task.description or "").lower()
        ]

    if status_filter == "overdue":
        filtered = [
            task for task in filtered
            if is_overdue(task.due_date, today) and task.status != "completed"
        ]
    elif status_filter != "all":
        filtered = [task for task in filtered if task.status == status_filter]
    return filtered


def compute_stats(tasks: Sequence[Task], today: Optional[date] = None) -> TaskStats:
    return TaskStats(
        total=len(tasks),
        completed=sum(1 for task in tasks if task.status == "completed"),
        pending=sum(1 for task in tasks if task.status == "pending"),
        overdue=sum(
            1 for task in tasks
            if is_overdue(task.due_date, today) and task.status != "completed"
        ),
    )


def completion_chart(tasks: Sequence[Task], today: Optional[date] = None) -> Dict[str, Any]:
    """
    Doughnut chart data. Overdue tasks are carved out of the pending slice.
    """
    stats = compute_stats(tasks, today)
    data = [stats.completed, max(stats.pending - stats.overdue, 0), stats.overdue]
    total = sum(data)
    return {
        "labels": ["Completed", "Pending", "Overdue"],
        "data": data,
        "percentages": [round(value / total * 100, 1) if total else 0 for value in data],
    }


class TaskService:
    """Task CRUD over the 'tasks' collection, keeping calendar events in step."""

    def __init__(self, event_store: Optional[EventStore] = None):
        self._store = get_store()
        self._events = event_store or select_event_store()

    def list(self) -> List[Task]:
        raw = self._store.get(TASKS_KEY, []) or []
        return [Task.model_validate(item) for item in raw]

    def get(self, task_id: str) -> Task:
        for task in self.list():
            if task.id == task_id:
                return task
        raise KeyError(task_id)

    def _save(self, tasks: List[Task], previous: List[Task]) -> None:
        self._store.set(TASKS_KEY, [task.model_dump(by_alias=True) for task in tasks])
        self.sync_events(tasks, [task.id for task in previous])

    def sync_events(self, tasks: Optional[List[Task]] = None, previous_ids: Optional[List[str]] = None) -> None:
        """Project tasks onto the event store. Runs after every task change."""
        tasks = self.list() if tasks is None else tasks
        with timing("sync_events") as t:
            events = reconcile_events(tasks, self._events.list(), previous_ids)
            self._events.replace_all(events)
        log_event("synced", "calendar-events", count=len(events), duration_ms=t.get_duration_ms())
        update_last_sync(len(events), t.get_duration_ms())

    def create(self, draft: TaskDraft) -> Task:
        previous = self.list()
        fields = draft.model_dump(exclude_none=True)
        task = Task(
            id=generate_id(),
            status="pending",
            created_at=now_iso(),
            **fields,
        )
        # Newest first
        self._save([task] + previous, previous)
        log_event("created", TASKS_KEY, item_id=task.id, count=len(previous) + 1, title=task.title)
        return task

    def update(self, task_id: str, draft: TaskDraft) -> Task:
        previous = self.list()
        updated: Optional[Task] = None
        tasks = []
        for task in previous:
            if task.id == task_id:
                task = task.model_copy(update=draft.model_dump(exclude_none=True))
                updated = task
            tasks.append(task)
        if updated is None:
            raise KeyError(task_id)

        self._save(tasks, previous)
        log_event("updated", TASKS_KEY, item_id=task_id, title=updated.title)
        return updated

    def delete(self, task_id: str) -> None:
        previous = self.list()
        tasks = [task for task in previous if task.id != task_id]
        if len(tasks) == len(previous):
            raise KeyError(task_id)

        self._save(tasks, previous)
        log_event("deleted", TASKS_KEY, item_id=task_id, count=len(tasks))

    def toggle_status(self, task_id: str) -> Task:
        task = self.get(task_id)
        new_status = "pending" if task.status == "completed" else "completed"
        previous = self.list()
        tasks = [
            t.model_copy(update={"status": new_status}) if t.id == task_id else t
            for t in previous
        ]
        self._save(tasks, previous)
        log_event("toggled", TASKS_KEY, item_id=task_id, status=new_status)
        return next(t for t in tasks if t.id == task_id)

    def reorder(self, active_id: str, over_id: Optional[str]) -> List[Task]:
        """Drag-and-drop move of active_id onto over_id's position."""
        previous = self.list()
        if over_id is None or active_id == over_id:
            return previous

        ids = [task.id for task in previous]
        if active_id not in ids or over_id not in ids:
            log_warning("Ignoring reorder with unknown ids", {"active_id": active_id, "over_id": over_id})
            return previous

        tasks = move_item(previous, ids.index(active_id), ids.index(over_id))
        self._save(tasks, previous)
        log_event("reordered", TASKS_KEY, item_id=active_id, count=len(tasks))
        return tasks


def synced_event_store() -> EventStore:
    """Event store with the current tasks projected in, the way the calendar reads it."""
    store = select_event_store()
    TaskService(event_store=store).sync_events()
    return store
