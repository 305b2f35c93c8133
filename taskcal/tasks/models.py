from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Priority = Literal["low", "medium", "high"]
Status = Literal["pending", "completed"]
TaskFilter = Literal["all", "pending", "completed", "overdue"]


class Task(BaseModel):
    """To-do item with a due date, priority and status."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: Optional[str] = None
    due_date: str = Field("", alias="dueDate")
    priority: Priority = "medium"
    status: Status = "pending"
    created_at: str = Field("", alias="createdAt")
    # Unvalidated: legacy records may carry any string or none
    category: Optional[str] = None
    start_time: str = Field("", alias="startTime")
    end_time: str = Field("", alias="endTime")


class TaskDraft(BaseModel):
    """Task form submission. Fields left as None are not touched on update."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = Field(None, alias="dueDate")
    priority: Optional[Priority] = None
    category: Optional[str] = None
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")


class ReorderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    active_id: str = Field(alias="activeId")
    over_id: Optional[str] = Field(None, alias="overId")


class TaskStats(BaseModel):
    total: int
    completed: int
    pending: int
    overdue: int
