# cli.py
import argparse
import json
import sys
from pathlib import Path

import config
from errors import TaskError, TaskNotFoundError, TaskValidationError
from models import VALID_STATUSES
from service import TaskService
from storage import TaskRepository


def print_json(data):
    print(json.dumps(data, indent=4, ensure_ascii=False))


def fail(message):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def collect_fields(args):
    """Pick the task fields that were given on the command line."""
    fields = {}
    for name in ("title", "description", "status"):
        value = getattr(args, name, None)
        if value is not None:
            fields[name] = value
    return fields


def build_parser():
    parser = argparse.ArgumentParser(description="Manage the task document from the command line.")
    parser.add_argument("--file", type=str, default=None, help=f"Path to the task document (default: {config.TASKS_FILE}).")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    subparsers.add_parser("list", help="List all tasks.")

    parser_show = subparsers.add_parser("show", help="Show a single task.")
    parser_show.add_argument("id", type=int, help="Task id.")

    parser_add = subparsers.add_parser("add", help="Create a new task.")
    parser_add.add_argument("--title", type=str, required=True, help="Task title.")
    parser_add.add_argument("--description", type=str, default=None, help="Task description.")
    parser_add.add_argument("--status", type=str, choices=VALID_STATUSES, default=None, help="Initial status (default: pending).")

    parser_update = subparsers.add_parser("update", help="Update fields of an existing task.")
    parser_update.add_argument("id", type=int, help="Task id.")
    parser_update.add_argument("--title", type=str, default=None, help="New title.")
    parser_update.add_argument("--description", type=str, default=None, help="New description.")
    parser_update.add_argument("--status", type=str, choices=VALID_STATUSES, default=None, help="New status.")

    parser_delete = subparsers.add_parser("delete", help="Delete a task.")
    parser_delete.add_argument("id", type=int, help="Task id.")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    data_file = Path(args.file) if args.file else config.TASKS_FILE
    repository = TaskRepository(data_file, lock_timeout=config.LOCK_TIMEOUT)

    try:
        repository.initialize()
        service = TaskService(repository)

        if args.command == "list":
            print_json(service.list_tasks())
        elif args.command == "show":
            print_json(service.get_task(args.id))
        elif args.command == "add":
            print_json(service.create_task(collect_fields(args)))
        elif args.command == "update":
            print_json(service.update_task(args.id, collect_fields(args)))
        elif args.command == "delete":
            service.delete_task(args.id)
            print(f"Deleted task {args.id}.")
    except TaskNotFoundError as e:
        fail(str(e))
    except TaskValidationError as e:
        fail("; ".join(f"{field}: {message}" for field, message in e.errors.items()))
    except TaskError as e:
        fail(str(e))


if __name__ == "__main__":
    main()
