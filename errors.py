# errors.py
from typing import Dict, Optional


class TaskError(Exception):
    """Base class for errors raised by the task storage and service layers."""


class TaskNotFoundError(TaskError):
    def __init__(self, task_id):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class TaskValidationError(TaskError):
    """Raised by the service when a request violates field constraints."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("Validation failed")
        self.errors = errors


class StorageError(TaskError):
    """The task document could not be read, written or locked."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
