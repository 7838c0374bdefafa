# main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
import envelopes
from errors import StorageError, TaskNotFoundError, TaskValidationError
from logging_setup import setup_logging
from routers import health, tasks
from service import TaskService
from storage import TaskRepository

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "GET /api/health": "Health check",
    "GET /api/tasks": "List all tasks",
    "GET /api/tasks/{id}": "Get specific task",
    "POST /api/tasks": "Create new task",
    "PUT /api/tasks/{id}": "Update task",
    "DELETE /api/tasks/{id}": "Delete task",
}


# --- Exception Handlers ---

async def handle_not_found(request: Request, exc: TaskNotFoundError):
    return envelopes.error("Task not found", 404)

async def handle_validation(request: Request, exc: TaskValidationError):
    return envelopes.error("Validation failed", 400, exc.errors)

async def handle_request_validation(request: Request, exc: RequestValidationError):
    """Maps FastAPI's body/path parsing errors onto the API's 400 envelope."""
    details = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        # The body as a whole is missing, unparseable or not an object.
        if err.get("type") == "json_invalid" or tuple(loc) == ("body",):
            return envelopes.error("Invalid JSON", 400)
        field = str(loc[-1]) if loc else "request"
        details.setdefault(field, err.get("msg", "Invalid value"))
    return envelopes.error("Validation failed", 400, details)

async def handle_storage_error(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return envelopes.server_error(str(exc))

async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return envelopes.error("Resource not found", 404)
    if exc.status_code == 405:
        return envelopes.error("Method not allowed", 405)
    return envelopes.error(str(exc.detail), exc.status_code)

async def handle_unexpected(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return envelopes.server_error(str(exc))


# --- App Factory ---

def create_app(repository: Optional[TaskRepository] = None) -> FastAPI:
    if repository is None:
        repository = TaskRepository(config.TASKS_FILE, lock_timeout=config.LOCK_TIMEOUT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manages application startup and shutdown events.
        """
        logger.info(f"Application starting up, task document: {repository.data_file}")
        repository.initialize()
        app.state.task_service = TaskService(repository)
        yield
        logger.info("Application shutting down...")

    app = FastAPI(
        title=config.SERVICE_NAME,
        description="A basic task management API with CRUD operations, stored in a JSON file.",
        version=config.SERVICE_VERSION,
        lifespan=lifespan,
    )

    # --- Middleware ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(TaskNotFoundError, handle_not_found)
    app.add_exception_handler(TaskValidationError, handle_validation)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StorageError, handle_storage_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)

    # --- Include API Routers ---
    app.include_router(health.router)
    app.include_router(tasks.router)

    # --- Root Endpoint ---
    @app.get("/")
    async def read_root():
        """Describes the service and its endpoints."""
        return {
            "service": config.SERVICE_NAME,
            "version": config.SERVICE_VERSION,
            "endpoints": ENDPOINTS,
        }

    @app.api_route("/api", methods=["GET", "POST", "PUT", "DELETE"], include_in_schema=False)
    async def api_without_resource():
        return envelopes.error("Invalid API endpoint", 404)

    return app


setup_logging(config.LOG_LEVEL)
app = create_app()

# --- Main Entry Point ---
if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
