# service.py
import logging
from typing import Dict, List

from errors import TaskNotFoundError, TaskValidationError
from models import merge_update, new_task_fields, validate_task
from storage import TaskRepository

logger = logging.getLogger(__name__)


class TaskService:
    """CRUD orchestration on top of the repository: validation and not-found handling."""

    def __init__(self, repository: TaskRepository):
        self.repository = repository

    def list_tasks(self) -> List[Dict]:
        return self.repository.get_all()

    def get_task(self, task_id: int) -> Dict:
        task = self.repository.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def create_task(self, data: Dict) -> Dict:
        fields = new_task_fields(data)
        errors = validate_task(fields)
        if errors:
            raise TaskValidationError(errors)

        task = self.repository.create(fields)
        logger.info(f"Created task {task['id']}: {task['title']!r}")
        return task

    def update_task(self, task_id: int, changes: Dict) -> Dict:
        existing = self.get_task(task_id)
        _, errors = merge_update(existing, changes)
        if errors:
            raise TaskValidationError(errors)

        # The task may have been deleted since it was read above.
        updated = self.repository.update(task_id, changes)
        if updated is None:
            raise TaskNotFoundError(task_id)
        logger.info(f"Updated task {task_id} ({', '.join(sorted(changes)) or 'no fields'})")
        return updated

    def delete_task(self, task_id: int) -> None:
        if not self.repository.delete(task_id):
            raise TaskNotFoundError(task_id)
        logger.info(f"Deleted task {task_id}")
