"""
Notes API: FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance;
       ``run()`` serves it with uvicorn.
Who:   uvicorn (``uvicorn notes_api.main:app``) or the ``notes-api`` script.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────────┐ ┌──────────┐ ┌──────────────────┐  │
    │  │  Request ID  │→│ Logging  │→│      CORS        │  │
    │  └──────────────┘ └──────────┘ └──────────────────┘  │
    │                                                      │
    │  Routes:                                             │
    │  ┌─────────────────────────┐ ┌────────────────────┐  │
    │  │ /api/notes[/{id}] CRUD  │ │ /api/healthchecker │  │
    │  └─────────────────────────┘ └────────────────────┘  │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ Body→400 │ InvalidId→400 │ Dup→409 │ Store→500 │  │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Connect to MongoDB, ping, ensure the unique title index
    3. Store the NoteService on app.state

    Shutdown:
    1. Close the motor client (all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notes_api import __version__
from notes_api.config import Settings, get_settings
from notes_api.database import MongoDatabase
from notes_api.exceptions import (
    DataAccessError,
    DuplicateKeyError,
    InvalidIdError,
    NotesError,
)
from notes_api.middleware.logging import RequestLoggingMiddleware
from notes_api.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from notes_api.routes import health, notes
from notes_api.schemas.note import GenericResponse
from notes_api.services.note_service import NoteService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Connect to the store on startup and close it on shutdown.

    A connection failure propagates out of the lifespan, so uvicorn aborts
    startup instead of serving requests without a store.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)

    database = await MongoDatabase.connect(
        settings.database_url,
        settings.mongo_initdb_database,
        settings.mongodb_note_collection,
    )
    app.state.database = database
    app.state.note_service = NoteService(database.collection)
    logger.info("Server started successfully on %s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Notes API shutting down...")
    database.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, envelope_status: str, message: str) -> JSONResponse:
    body = GenericResponse(status=envelope_status, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and envelopes.

    Handler hierarchy:
        RequestValidationError  → 400 "Invalid Body" / "Invalid query parameters"
        InvalidIdError          → 400 (message echoes the id)
        DuplicateKeyError       → 409
        DataAccessError (rest)  → 500 generic message
        NotesError (base)       → 500 generic message
        HTTPException           → its own status (404 route, 405 method, ...)
        Exception (fallback)    → 500 generic message

    Causes are logged server-side with the request ID; responses never
    contain driver messages.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        locations = [tuple(error.get("loc", ())) for error in exc.errors()]
        from_body = any(loc[:1] == ("body",) for loc in locations)
        message = "Invalid Body" if from_body else "Invalid query parameters"
        # Locations only: the offending input may be sensitive
        logger.warning("[%s] %s at %s", rid, message, locations)
        return error_response(400, "fail", message)

    @app.exception_handler(InvalidIdError)
    async def handle_invalid_id(request: Request, exc: InvalidIdError):
        logger.warning("[%s] Invalid ID: %s", request_id_var.get(""), exc.note_id)
        return error_response(400, "fail", exc.message)

    @app.exception_handler(DuplicateKeyError)
    async def handle_duplicate_key(request: Request, exc: DuplicateKeyError):
        logger.warning(
            "[%s] Duplicate key: %s | Context: %s",
            request_id_var.get(""),
            exc.cause,
            exc.context,
        )
        return error_response(409, "fail", exc.message)

    @app.exception_handler(DataAccessError)
    async def handle_data_access_error(request: Request, exc: DataAccessError):
        logger.error(
            "[%s] %s: %s | Cause: %r | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.cause,
            exc.context,
        )
        return error_response(500, "error", "An internal error occurred. Please try again later.")

    @app.exception_handler(NotesError)
    async def handle_notes_error(request: Request, exc: NotesError):
        logger.error("[%s] %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "error", "An internal error occurred. Please try again later.")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = "Route does not exist on the server"
        elif exc.status_code == 405:
            message = "Method Not Allowed"
        else:
            message = str(exc.detail)
        envelope_status = "error" if exc.status_code >= 500 else "fail"
        response = error_response(exc.status_code, envelope_status, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            exc,
            exc_info=exc,
        )
        return error_response(500, "error", "Internal Server Error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use; defaults to ``get_settings()``, which
                  raises if the store settings are missing.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Notes API",
        description="CRUD operations on notes stored in MongoDB.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["content-type"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Serve the application with uvicorn on the configured host/port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "notes_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `notes_api.main:app` to be importable
app = create_app()
