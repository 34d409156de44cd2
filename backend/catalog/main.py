"""
Catalog API — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn catalog.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routes:      /products   /categories   /health          │
    │               (bearer auth on products and categories)   │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  Auth→401  NotFound→404                │
    │    Database→500    Upload→500  anything else→500         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report missing credentials, optionally create tables
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from catalog import __version__
from catalog.config import settings
from catalog.database import create_tables, dispose_engine
from catalog.exceptions import (
    AuthenticationError,
    CatalogError,
    DatabaseError,
    ErrorKind,
    ImageUploadError,
    NotFoundError,
    ValidationError,
)
from catalog.middleware.logging import RequestLoggingMiddleware
from catalog.middleware.request_id import RequestIDMiddleware, request_id_var
from catalog.routes import categories, health, products

logger = logging.getLogger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PERSISTENCE_FAILED: 500,
    ErrorKind.UPLOAD_FAILED: 500,
    ErrorKind.NOTIFICATION_FAILED: 500,
    ErrorKind.UNEXPECTED: 500,
}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, written to stdout
    so container runtimes collect it. Chatty third-party loggers are raised
    to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Catalog API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health still answers and the affected routes fail on their own
        logger.error("Configuration error: %s", str(e))

    if settings.db_create_tables:
        logger.info("DB_CREATE_TABLES is set; creating missing tables")
        await create_tables()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Catalog API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(
    kind: ErrorKind,
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Builds the JSON envelope shared by every error response."""
    body: Dict[str, Any] = {
        "error": kind.value,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if errors is not None:
        body["errors"] = errors
    if details:
        body["details"] = details
    return body


def request_validation_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """
    Flattens FastAPI's request parsing errors (malformed JSON, a non-object
    body, a text part sent where a file was expected) into field violations.
    """
    violations = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "form")]
        violations.append(
            {
                "field": ".".join(location) or "body",
                "message": error.get("msg", "Invalid value"),
            }
        )
    return violations


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error envelope.

    Handler hierarchy:
        ValidationError         → 400 with the ordered `errors` list
        RequestValidationError  → 400 (request could not be parsed)
        AuthenticationError     → 401 with WWW-Authenticate
        NotFoundError           → 404
        DatabaseError           → 500, driver message included
        ImageUploadError        → 500
        CatalogError (base)     → status from STATUS_BY_KIND
        Exception (fallback)    → 500, generic message, stack trace logged
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body(exc.kind, exc.message, errors=exc.errors, details=exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        violations = request_validation_errors(exc)
        message = "Validation failed: " + "; ".join(v["message"] for v in violations)
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=error_body(ErrorKind.VALIDATION_FAILED, message, errors=violations),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        logger.warning(
            "[%s] Rejected %s %s: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            exc.message,
        )
        return JSONResponse(
            status_code=401,
            content=error_body(exc.kind, exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_body(exc.kind, exc.message, details=exc.context),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=500, content=error_body(exc.kind, exc.message))

    @app.exception_handler(ImageUploadError)
    async def handle_image_upload_error(request: Request, exc: ImageUploadError):
        logger.error(
            "[%s] Image upload error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=500, content=error_body(exc.kind, exc.message))

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(request: Request, exc: CatalogError):
        status = STATUS_BY_KIND.get(exc.kind, 500)
        logger.error("[%s] %s: %s", request_id_var.get(""), exc.kind.value, exc.message)
        return JSONResponse(status_code=status, content=error_body(exc.kind, exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                ErrorKind.UNEXPECTED,
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Catalog API",
        description=(
            "Product and category catalog. Products carry an optional image hosted "
            "on Cloudinary; creating a category emails the administrator."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(products.router)
    app.include_router(categories.router)
    app.include_router(health.router)

    return app


app = create_app()
