# models.py
"""Task fields, request payloads and the validation rules shared by the API and CLI."""
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

VALID_STATUSES = ["pending", "in_progress", "completed"]
DEFAULT_STATUS = "pending"
MAX_TITLE_LENGTH = 255


class TaskPayload(BaseModel):
    """Body of POST and PUT requests. Unknown keys (id, timestamps, ...) are dropped."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

    def changes(self) -> Dict:
        """Fields the client actually sent; null counts as not sent."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


def new_task_fields(data: Dict) -> Dict:
    """Fill in the defaults for a task that is about to be created."""
    return {
        "title": data.get("title", ""),
        "description": data.get("description", ""),
        "status": data.get("status", DEFAULT_STATUS),
    }


def validate_task(task: Dict) -> Dict[str, str]:
    """Return a field -> message mapping; empty when the task is valid."""
    errors = {}

    title = task.get("title") or ""
    if not title.strip():
        errors["title"] = "Title is required"
    elif len(title) > MAX_TITLE_LENGTH:
        errors["title"] = f"Title must not exceed {MAX_TITLE_LENGTH} characters"

    if task.get("status") not in VALID_STATUSES:
        errors["status"] = "Status must be one of: " + ", ".join(VALID_STATUSES)

    return errors


def merge_update(existing: Dict, changes: Dict) -> Tuple[Dict, Dict[str, str]]:
    """
    Project a partial update onto the stored record and validate the result.

    Validation runs on the merged record rather than on the delta, so a
    request that only sends ``status`` is checked against the stored title.
    """
    candidate = {**existing, **changes}
    return candidate, validate_task(candidate)
