from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Category = Literal["work", "personal", "breaks", "meetings"]
Granularity = Literal["day", "week", "month"]

CATEGORIES: tuple = ("work", "personal", "breaks", "meetings")


class Event(BaseModel):
    """Timed calendar entry. Replaced wholesale on edit, never mutated."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    date: str  # YYYY-MM-DD, no time zone
    start_time: str = Field(alias="startTime")  # HH:MM, 24h
    end_time: str = Field(alias="endTime")      # HH:MM, 24h
    category: Category = "work"
    attendees: Optional[List[str]] = None


class EventDraft(BaseModel):
    """Event form submission; the store assigns the id."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: Optional[str] = None
    date: str = ""
    start_time: str = Field("", alias="startTime")
    end_time: str = Field("", alias="endTime")
    category: str = ""
    attendees: List[str] = []


class ViewWindow(BaseModel):
    reference: date
    granularity: Granularity = "week"


class EventPlacement(BaseModel):
    """Geometry for one event in abstract units: minutes vertically, percent horizontally."""

    event_id: str
    top: int
    height: int
    duration: int
    left_percent: float
    width_percent: float
    column: int
    column_count: int
    z_index: int


class DayLayout(BaseModel):
    date: str
    events: List[Event] = []
    placements: List[EventPlacement] = []
    overflow: int = 0


class CalendarGrid(BaseModel):
    reference: str
    granularity: Granularity
    buckets: List[Optional[str]]
    days: List[DayLayout]
