# routers/tasks.py
from fastapi import APIRouter, Depends, Response
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

import envelopes
from dependencies import get_task_service
from models import TaskPayload
from service import TaskService

# --- Router Setup ---
router = APIRouter(
    prefix="/api/tasks",
    tags=["Task Management"],
)

# --- Endpoints ---
# Plain `def` endpoints: the repository blocks on file locks, so FastAPI runs
# these in its thread pool instead of on the event loop.

@router.get("")
def list_tasks(service: TaskService = Depends(get_task_service)):
    """Get the list of all tasks in insertion order."""
    return envelopes.success(service.list_tasks(), "Tasks retrieved successfully")

@router.get("/{task_id}")
def get_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return envelopes.success(service.get_task(task_id), "Task retrieved successfully")

@router.post("")
def create_task(payload: TaskPayload, service: TaskService = Depends(get_task_service)):
    """Creates a task. Missing description and status fall back to defaults."""
    task = service.create_task(payload.changes())
    return envelopes.success(task, "Task created successfully", HTTP_201_CREATED)

@router.put("/{task_id}")
def update_task(task_id: int, payload: TaskPayload, service: TaskService = Depends(get_task_service)):
    """Updates only the fields present in the body."""
    task = service.update_task(task_id, payload.changes())
    return envelopes.success(task, "Task updated successfully")

@router.delete("/{task_id}")
def delete_task(task_id: int, service: TaskService = Depends(get_task_service)):
    service.delete_task(task_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
