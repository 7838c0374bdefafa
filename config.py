# config.py
import math
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def number_env(name: str, default, cast):
    """Read a finite, non-negative number from the environment or exit."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value) or value < 0:
        print(f"FATAL: {name} must be a finite non-negative number, got {raw!r}. The application cannot start.")
        sys.exit(1)
    return value


# --- Storage ---
DATA_DIR = Path(os.getenv("TASKS_DATA_DIR", "data"))
TASKS_FILE = Path(os.getenv("TASKS_FILE") or DATA_DIR / "tasks.json")
LOCK_TIMEOUT = number_env("TASKS_LOCK_TIMEOUT", 10.0, float)

# --- Server ---
HOST = os.getenv("HOST", "0.0.0.0")
PORT = number_env("PORT", 8000, int)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

SERVICE_NAME = "Task Microservice API"
SERVICE_VERSION = "1.0.0"
