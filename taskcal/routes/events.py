from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from taskcal.calendar.store import select_event_store
from taskcal.calendar.types import Event, EventDraft
from taskcal.routes.auth import require_api_key_if_configured
from taskcal.tasks.service import synced_event_store
from taskcal.tasks.utils import generate_id
from taskcal.tasks.validation import validate_event


router = APIRouter(dependencies=[Depends(require_api_key_if_configured)])


def _not_found(event_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Event not found: {event_id}")


def _event_from_draft(event_id: str, draft: EventDraft) -> Event:
    errors = validate_event(draft)
    if errors:
        raise HTTPException(status_code=422, detail=errors)

    return Event(
        id=event_id,
        title=draft.title,
        description=draft.description,
        date=draft.date,
        start_time=draft.start_time,
        end_time=draft.end_time,
        category=draft.category,
        attendees=draft.attendees,
    )


@router.get("", response_model=List[Event])
async def list_events():
    return synced_event_store().list()


@router.post("", response_model=Event, status_code=201)
async def create_event(draft: EventDraft):
    """Create an event from the calendar form; it gets a fresh id."""
    event = _event_from_draft(generate_id(), draft)
    select_event_store().add(event)
    return event


@router.get("/{event_id}", response_model=Event)
async def get_event(event_id: str):
    event = synced_event_store().get(event_id)
    if event is None:
        raise _not_found(event_id)
    return event


@router.put("/{event_id}", response_model=Event)
async def replace_event(event_id: str, draft: EventDraft):
    """
    Replace an event wholesale from the edit form. The id and list position are kept.
    """
    store = select_event_store()
    if store.get(event_id) is None:
        raise _not_found(event_id)

    event = _event_from_draft(event_id, draft)
    store.replace(event)
    return event


@router.delete("/{event_id}", status_code=204)
async def delete_event(event_id: str) -> Response:
    if not select_event_store().remove(event_id):
        raise _not_found(event_id)
    return Response(status_code=204)
