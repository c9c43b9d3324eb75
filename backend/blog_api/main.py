"""
Blog Posts API: FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers and
       returns a FastAPI instance. The database handle is either handed in
       by the caller (server lifecycle, tests) or created by the lifespan.
Who:   `uvicorn blog_api.main:app`, blog_api.server.BlogServer, tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  [Request ID] → [Access Logging]       │
    │                                                     │
    │  Routes:      /blog-posts (CRUD)   /   /health      │
    │                                                     │
    │  Exception Handlers:                                │
    │   ValidationError / bad body → 400                  │
    │   NotFoundError              → 404                  │
    │   DatabaseError / anything   → 500 (generic)        │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional, Sequence, Tuple, Type, get_type_hints

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from blog_api import __version__
from blog_api.config import Settings, settings as default_settings
from blog_api.database import Database
from blog_api.exceptions import (
    BlogApiError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from blog_api.middleware.logging import RequestLoggingMiddleware
from blog_api.middleware.request_id import RequestIDMiddleware, request_id_var
from blog_api.routes import blog_posts, health, pages

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"

# Location prefixes FastAPI puts in front of the offending field name
_REQUEST_PARTS = {"body", "path", "query", "header", "cookie"}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (containers capture it)
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, level or default_settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. If no Database was handed to create_app(), build one from settings,
           verify the connection and optionally create tables
    Shutdown:
        Dispose the Database, but only if this lifespan created it. A caller
        that passed its own Database also closes it.
    """
    config: Settings = app.state.settings
    setup_logging(config.log_level)
    logger.info("Blog Posts API %s starting up", __version__)

    owned_database: Optional[Database] = None
    if getattr(app.state, "database", None) is None:
        owned_database = Database.from_settings(config)
        await owned_database.connect()
        if config.db_create_all:
            await owned_database.create_all()
        app.state.database = owned_database

    yield

    logger.info("Blog Posts API shutting down")
    if owned_database is not None:
        await owned_database.dispose()
        app.state.database = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def body_model_for(request: Request) -> Optional[Type[BaseModel]]:
    """The pydantic model the matched endpoint expects as its JSON body, if any."""
    endpoint = request.scope.get("endpoint")
    if endpoint is None:
        return None
    hints = get_type_hints(endpoint)
    hints.pop("return", None)
    for hint in hints.values():
        if isinstance(hint, type) and issubclass(hint, BaseModel):
            return hint
    return None


def summarize_request_errors(
    errors: Sequence[Dict[str, Any]],
    body_model: Optional[Type[BaseModel]] = None,
) -> Tuple[str, Optional[str]]:
    """
    Turn FastAPI's list of request validation errors into one message.

    Only the first error is reported. Pydantic lists errors in field
    declaration order, so for a create body missing several fields the
    message names the first of title, author, content that is absent.

    An absent body is read as `{}` when `body_model` is given, so a POST
    with no body reports its first required field like an empty object would.

    Returns:
        (message, field) where field is the dotted path of the offending
        field, or None when the problem is with the body as a whole.
    """
    if not errors:
        return "Invalid request", None

    first = errors[0]
    error_type = first.get("type", "")
    if error_type == "json_invalid":
        return "Request body is not valid JSON", None

    loc = list(first.get("loc", ()))
    if loc and loc[0] in _REQUEST_PARTS:
        loc = loc[1:]
    field = ".".join(str(part) for part in loc) or None

    if field is None:
        if error_type == "missing":
            if body_model is not None:
                try:
                    body_model.model_validate({})
                except PydanticValidationError as e:
                    return summarize_request_errors(e.errors())
            return "Missing request body", None
        return f"Invalid request body: {first.get('msg', 'invalid value')}", None

    if error_type == "missing":
        return f"Missing `{field}` in request body", field
    return f"Invalid `{field}` in request body: {first.get('msg', 'invalid value')}", field


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

        ValidationError          → 400
        RequestValidationError   → 400 (same contract, not FastAPI's default 422)
        NotFoundError            → 404
        DatabaseError            → 500 (generic message, details logged)
        BlogApiError (base)      → 500
        Exception (fallback)     → 500
    """

    def _bad_request(message: str, details: Dict[str, Any]) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": message,
                "details": details,
                "request_id": request_id_var.get(""),
            },
        )

    def _server_error() -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": GENERIC_SERVER_ERROR,
                "request_id": request_id_var.get(""),
            },
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _bad_request(exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        message, field = summarize_request_errors(exc.errors(), body_model_for(request))
        logger.warning("[%s] Invalid request body: %s", request_id_var.get(""), message)
        return _bad_request(message, {"field": field} if field else {})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": request_id_var.get(""),
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _server_error()

    @app.exception_handler(BlogApiError)
    async def handle_app_error(request: Request, exc: BlogApiError):
        logger.error(
            "[%s] Application error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _server_error()

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, outside RequestIDMiddleware
        rid = request_id_var.get("") or request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        response = _server_error()
        response.headers["X-Request-ID"] = rid
        return response


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config:   Settings to use (defaults to the module singleton)
        database: An already constructed Database. When given, the app
                  neither connects nor disposes it.
    """
    config = config or default_settings

    app = FastAPI(
        title="Blog Posts API",
        description="Create, list, fetch, update and delete blog posts.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.database = database

    # Last added runs first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    for router in (blog_posts.router, pages.router, health.router):
        app.include_router(router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# `uvicorn blog_api.main:app` imports this
app = create_app()
