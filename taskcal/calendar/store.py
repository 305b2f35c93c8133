from typing import List, Optional, Protocol

from taskcal.calendar.types import Event
from taskcal.core.config import load_config
from taskcal.observability.logger import log_event
from taskcal.storage.store import get_store


EVENTS_KEY = "calendar-events"


class EventStore(Protocol):
    def list(self) -> List[Event]:
        """Return all events in insertion order."""
        ...

    def get(self, event_id: str) -> Optional[Event]:
        ...

    def add(self, event: Event) -> None:
        ...

    def remove(self, event_id: str) -> bool:
        """Delete by id. Returns False when nothing matched."""
        ...

    def replace(self, event: Event) -> bool:
        """Swap in a new version of an event, keeping its position. False when the id is unknown."""
        ...

    def replace_all(self, events: List[Event]) -> None:
        ...


class MemoryEventStore:
    def __init__(self, events: Optional[List[Event]] = None) -> None:
        self._events: List[Event] = list(events or [])

    def list(self) -> List[Event]:
        return list(self._events)

    def get(self, event_id: str) -> Optional[Event]:
        for event in self._events:
            if event.id == event_id:
                return event
        return None

    def add(self, event: Event) -> None:
        self._events.append(event)
        log_event("created", EVENTS_KEY, item_id=event.id, count=len(self._events), title=event.title)

    def remove(self, event_id: str) -> bool:
        kept = [event for event in self._events if event.id != event_id]
        removed = len(kept) != len(self._events)
        self._events = kept
        if removed:
            log_event("deleted", EVENTS_KEY, item_id=event_id, count=len(kept))
        return removed

    def replace(self, event: Event) -> bool:
        for index, current in enumerate(self._events):
            if current.id == event.id:
                self._events[index] = event
                log_event("updated", EVENTS_KEY, item_id=event.id, title=event.title)
                return True
        return False

    def replace_all(self, events: List[Event]) -> None:
        self._events = list(events)


class JsonEventStore(MemoryEventStore):
    """Events persisted as one JSON list under the 'calendar-events' key."""

    def __init__(self) -> None:
        raw = get_store().get(EVENTS_KEY, [])
        super().__init__([Event.model_validate(item) for item in raw or []])

    def _save(self) -> None:
        get_store().set(EVENTS_KEY, [event.model_dump(by_alias=True) for event in self._events])

    def add(self, event: Event) -> None:
        super().add(event)
        self._save()

    def remove(self, event_id: str) -> bool:
        removed = super().remove(event_id)
        if removed:
            self._save()
        return removed

    def replace(self, event: Event) -> bool:
        replaced = super().replace(event)
        if replaced:
            self._save()
        return replaced

    def replace_all(self, events: List[Event]) -> None:
        super().replace_all(events)
        self._save()


_memory_store: Optional[MemoryEventStore] = None


def select_event_store() -> EventStore:
    """Factory function to select the event store based on the EVENT_STORE env var."""
    global _memory_store
    backend = load_config().event_store

    if backend == "json":
        return JsonEventStore()
    elif backend == "memory":
        if _memory_store is None:
            _memory_store = MemoryEventStore()
        return _memory_store
    else:
        raise ValueError(f"Unsupported EVENT_STORE: {backend}")


def reset_memory_store() -> None:
    global _memory_store
    _memory_store = None
