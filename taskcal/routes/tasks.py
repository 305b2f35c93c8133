from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse

from taskcal.routes.auth import require_api_key_if_configured
from taskcal.tasks.models import ReorderRequest, Task, TaskDraft
from taskcal.tasks.service import TaskService, completion_chart, compute_stats, filter_tasks
from taskcal.tasks.validation import validate_task


router = APIRouter(dependencies=[Depends(require_api_key_if_configured)])


def _raise_if_invalid(errors: Dict[str, str]) -> None:
    if errors:
        raise HTTPException(status_code=422, detail=errors)


def _not_found(task_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Task not found: {task_id}")


@router.get("", response_model=List[Task])
async def list_tasks(
    filter: Literal["all", "pending", "completed", "overdue"] = Query("all", description="Status filter"),
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
):
    """List tasks in display order, narrowed by the status filter and search term."""
    return filter_tasks(TaskService().list(), filter, search or "")


@router.get("/stats")
async def task_stats() -> JSONResponse:
    """Dashboard counters plus completion chart data."""
    tasks = TaskService().list()
    return JSONResponse(
        status_code=200,
        content={
            "stats": compute_stats(tasks).model_dump(),
            "chart": completion_chart(tasks),
        },
    )


@router.post("", response_model=Task, status_code=201)
async def create_task(draft: TaskDraft):
    _raise_if_invalid(validate_task(draft))
    return TaskService().create(draft)


@router.post("/reorder", response_model=List[Task])
async def reorder_tasks(body: ReorderRequest):
    return TaskService().reorder(body.active_id, body.over_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(task_id: str, draft: TaskDraft):
    """
    Edit a task. The merged result is validated as a whole, like the edit form.
    """
    service = TaskService()
    try:
        current = service.get(task_id)
    except KeyError:
        raise _not_found(task_id)

    merged = TaskDraft.model_validate({
        **current.model_dump(include=set(TaskDraft.model_fields)),
        **draft.model_dump(exclude_none=True),
    })
    _raise_if_invalid(validate_task(merged))
    return service.update(task_id, draft)


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(task_id: str):
    try:
        return TaskService().toggle_status(task_id)
    except KeyError:
        raise _not_found(task_id)


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: str) -> Response:
    try:
        TaskService().delete(task_id)
    except KeyError:
        raise _not_found(task_id)
    return Response(status_code=204)
