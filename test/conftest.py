import itertools

import pytest
from fastapi.testclient import TestClient

from main import create_app
from service import TaskService
from storage import TaskRepository


@pytest.fixture
def tasks_file(tmp_path):
    """Path to a task document inside a per-test temporary directory."""
    return tmp_path / "data" / "tasks.json"


@pytest.fixture
def clock():
    """A clock that advances one second on every call."""
    counter = itertools.count()
    return lambda: f"2024-05-01T12:00:{next(counter):02d}+00:00"


@pytest.fixture
def repository(tasks_file, clock):
    repo = TaskRepository(tasks_file, lock_timeout=5, clock=clock)
    repo.initialize()
    return repo


@pytest.fixture
def service(repository):
    return TaskService(repository)


@pytest.fixture
def client(tasks_file, clock):
    """
    A TestClient around an app bound to the temporary document.
    Entering the client runs the lifespan, which initializes storage.
    """
    repo = TaskRepository(tasks_file, lock_timeout=5, clock=clock)
    with TestClient(create_app(repo)) as test_client:
        yield test_client
