# dependencies.py
from fastapi import Request

from service import TaskService


def get_task_service(request: Request) -> TaskService:
    """
    Returns the TaskService created during application startup.
    Routes depend on this instead of importing a global, so tests can
    build an app around their own repository.
    """
    return request.app.state.task_service
