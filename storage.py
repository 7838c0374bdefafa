# storage.py
import fcntl
import json
import os
import time
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from errors import StorageError

MUTABLE_FIELDS = ("title", "description", "status")
LOCK_POLL_INTERVAL = 0.01


def local_now() -> str:
    """Current local time as ISO-8601 with UTC offset, second precision."""
    return datetime.now().astimezone().isoformat(timespec="seconds")


class TaskRepository:
    """
    Stores the task document as a single JSON array on disk.

    Every operation holds an flock on a sidecar ``<document>.lock`` file:
    shared for reads, exclusive for the whole read-modify-write cycle of
    mutations. Each call opens its own descriptor, so the lock serializes
    threads of this process as well as other processes using the same file.
    Writes land in a temp file that is renamed over the document.
    """

    def __init__(
        self,
        data_file: Path,
        lock_timeout: float = 10.0,
        clock: Optional[Callable[[], str]] = None,
    ):
        self.data_file = Path(data_file)
        self.lock_file = self.data_file.with_name(self.data_file.name + ".lock")
        self.lock_timeout = lock_timeout
        self._clock = clock or local_now

    # --- Public API ---

    def initialize(self) -> None:
        """Create the data directory and an empty document if there is none."""
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Unable to create data directory: {e}", str(self.data_file.parent)) from e

        with self._locked(exclusive=True):
            if not self.data_file.exists() or self.data_file.stat().st_size == 0:
                self._write([])

    def get_all(self) -> List[Dict]:
        with self._locked(exclusive=False):
            return self._read()

    def get_by_id(self, task_id: int) -> Optional[Dict]:
        with self._locked(exclusive=False):
            tasks = self._read()
        return next((t for t in tasks if t.get("id") == task_id), None)

    def create(self, task_data: Dict) -> Dict:
        with self._locked(exclusive=True):
            tasks = self._read()
            max_id = max((t["id"] for t in tasks), default=0)
            now = self._clock()

            new_task = dict(task_data)
            new_task["id"] = max_id + 1
            new_task["created_at"] = now
            new_task["updated_at"] = now

            tasks.append(new_task)
            self._write(tasks)
        return new_task

    def update(self, task_id: int, changes: Dict) -> Optional[Dict]:
        """Overwrite the mutable fields present in ``changes``; None if no such task."""
        with self._locked(exclusive=True):
            tasks = self._read()
            task = next((t for t in tasks if t.get("id") == task_id), None)
            if task is None:
                return None

            for field in MUTABLE_FIELDS:
                if field in changes:
                    task[field] = changes[field]
            task["updated_at"] = self._clock()

            self._write(tasks)
        return task

    def delete(self, task_id: int) -> bool:
        with self._locked(exclusive=True):
            tasks = self._read()
            remaining = [t for t in tasks if t.get("id") != task_id]
            if len(remaining) == len(tasks):
                return False
            self._write(remaining)
        return True

    # --- Internals ---

    @contextmanager
    def _locked(self, exclusive: bool) -> Iterator[None]:
        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        try:
            handle = open(self.lock_file, "a+b")
        except OSError as e:
            raise StorageError(f"Unable to open lock file: {e}", str(self.lock_file)) from e

        try:
            deadline = time.monotonic() + self.lock_timeout
            while True:
                try:
                    fcntl.flock(handle.fileno(), mode | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise StorageError(
                            f"Timed out after {self.lock_timeout}s waiting for the task document lock",
                            str(self.data_file),
                        )
                    time.sleep(LOCK_POLL_INTERVAL)
                except OSError as e:
                    raise StorageError(f"Unable to lock task document: {e}", str(self.data_file)) from e

            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        finally:
            handle.close()

    def _read(self) -> List[Dict]:
        try:
            with open(self.data_file, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise StorageError(f"Unable to read task document: {e}", str(self.data_file)) from e

        try:
            tasks = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Task document is not valid JSON: {e}", str(self.data_file)) from e

        if not isinstance(tasks, list):
            raise StorageError("Task document must contain a JSON array", str(self.data_file))
        for task in tasks:
            if not _is_task_record(task):
                raise StorageError("Task document contains a malformed task record", str(self.data_file))
        return tasks

    def _write(self, tasks: List[Dict]) -> None:
        tmp_path = self.data_file.parent / f".tmp-{uuid.uuid4().hex}-{self.data_file.name}"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(tasks, f, indent=4, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.data_file)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Unable to write task document: {e}", str(self.data_file)) from e
        finally:
            # Gone after a successful replace; left over on any failure or interrupt.
            tmp_path.unlink(missing_ok=True)


def _is_task_record(task) -> bool:
    """A stored task must be an object with an integer id (bool is not an id)."""
    if not isinstance(task, dict):
        return False
    task_id = task.get("id")
    return isinstance(task_id, int) and not isinstance(task_id, bool)
