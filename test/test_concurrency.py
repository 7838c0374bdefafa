import json
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from storage import TaskRepository

PROJECT_ROOT = Path(__file__).parent.parent


def new_repository(tasks_file):
    """A separate repository object per worker, as separate requests would have."""
    return TaskRepository(tasks_file, lock_timeout=30)


def test_concurrent_creates_allocate_distinct_sequential_ids(repository, tasks_file):
    count = 50

    def create(i):
        return new_repository(tasks_file).create({"title": f"task {i}", "description": "", "status": "pending"})

    with ThreadPoolExecutor(max_workers=16) as pool:
        created = list(pool.map(create, range(count)))

    assert sorted(t["id"] for t in created) == list(range(1, count + 1))
    stored = repository.get_all()
    assert len(stored) == count
    assert {t["id"] for t in stored} == set(range(1, count + 1))


def test_concurrent_updates_to_different_tasks_are_not_lost(repository, tasks_file):
    for i in range(20):
        repository.create({"title": f"task {i}", "description": "", "status": "pending"})

    def complete(task_id):
        return new_repository(tasks_file).update(task_id, {"status": "completed"})

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(complete, range(1, 21)))

    assert all(t["status"] == "completed" for t in repository.get_all())


def test_mixed_concurrent_mutations_and_reads(repository, tasks_file):
    for i in range(30):
        repository.create({"title": f"seed {i}", "description": "", "status": "pending"})

    def work(i):
        repo = new_repository(tasks_file)
        if i % 3 == 0:
            return ("delete", repo.delete(i // 3 + 1))
        if i % 3 == 1:
            return ("create", repo.create({"title": f"new {i}", "description": "", "status": "pending"}))
        # Readers must always see a complete, parseable document.
        return ("read", repo.get_all())

    with ThreadPoolExecutor(max_workers=12) as pool:
        results = list(pool.map(work, range(30)))

    deleted = sum(1 for kind, r in results if kind == "delete" and r)
    created = [r for kind, r in results if kind == "create"]
    stored = repository.get_all()

    assert deleted == 10
    assert len(stored) == 30 - deleted + len(created)
    ids = [t["id"] for t in stored]
    assert len(ids) == len(set(ids))
    assert {t["id"] for t in created} <= set(ids)


def test_concurrent_creates_from_separate_processes(repository, tasks_file):
    count = 8
    procs = [
        subprocess.Popen(
            [sys.executable, "cli.py", "--file", str(tasks_file), "add", "--title", f"proc {i}"],
            cwd=PROJECT_ROOT,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
        )
        for i in range(count)
    ]
    outputs = [p.communicate(timeout=60) for p in procs]

    for proc, (stdout, stderr) in zip(procs, outputs):
        assert proc.returncode == 0, stderr

    returned_ids = sorted(json.loads(stdout)["id"] for stdout, _ in outputs)
    assert returned_ids == list(range(1, count + 1))
    assert sorted(t["id"] for t in repository.get_all()) == list(range(1, count + 1))
