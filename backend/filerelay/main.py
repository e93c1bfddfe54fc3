"""
FileRelay — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error handling,
       service wiring, and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn filerelay.main:app) and by tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐        │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│ CORS │        │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘        │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────┐ ┌─────────────┐           │
    │  │ POST /process-file   │ │ GET /health │           │
    │  └──────────────────────┘ └─────────────┘           │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ FileRelayError → ERROR_STATUS_CODES table     │  │
    │  │ unmatched route → 404 │ anything else → 500   │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report mode, warn about missing settings
    Shutdown: close the shared HTTP client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from filerelay import __version__
from filerelay.config import Settings, get_settings
from filerelay.exceptions import ClientInputError, FileRelayError, status_code_for
from filerelay.middleware.logging import RequestLoggingMiddleware
from filerelay.middleware.request_id import RequestIDMiddleware, request_id_var
from filerelay.routes import health, relay
from filerelay.services.relay_service import build_relay_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by the container runtime)
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These libraries log every connection and request at DEBUG/INFO
    for noisy in ("uvicorn.access", "httpcore", "httpx", "botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Report the relay mode and any missing settings. A misconfigured
           server still starts; relay requests answer 500 until fixed.
    Shutdown:
        1. Close the shared httpx client (pooled connections)
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("FileRelay %s starting in %s mode", __version__, settings.relay_mode)

    missing = settings.missing_settings()
    if missing:
        logger.warning(
            "Configuration incomplete for %s mode, missing: %s",
            settings.relay_mode,
            ", ".join(missing),
        )

    logger.info("Scratch directory: %s", settings.temp_dir)
    logger.info(
        "Limits: download %.0fs / %d bytes, extraction %.0fs",
        settings.download_timeout,
        settings.max_download_size,
        settings.forward_timeout,
    )

    yield

    logger.info("FileRelay shutting down...")
    await app.state.http_client.aclose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        FileRelayError          → status from ERROR_STATUS_CODES, body from exc.body()
        RequestValidationError  → 400 (body was not a JSON object)
        HTTPException 404/405   → 404 {"error": "Not found"}
        Exception (fallback)    → 500 {"error": "Internal server error"}
    """

    @app.exception_handler(FileRelayError)
    async def handle_relay_error(request: Request, exc: FileRelayError):
        status = status_code_for(exc)
        rid = request_id_var.get("")
        if status >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid,
                type(exc).__name__,
                exc.message,
                exc.context,
                exc_info=exc.__cause__ is not None,
            )
        else:
            logger.warning("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(status_code=status, content=exc.body())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body missing or not a JSON object: there is no fileUrl to read."""
        error = ClientInputError(message="fileUrl is required")
        logger.warning("[%s] Unusable request body: %s", request_id_var.get(""), exc.errors())
        return JSONResponse(status_code=status_code_for(error), content=error.body())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Wrong method on a known path is reported like an unknown path
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Last-resort safety net for anything that escaped the pipeline."""
        logger.error("[%s] Unhandled error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    s3_client: Optional[Any] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:  Configuration; defaults to the cached environment settings.
        transport: httpx transport for outbound calls (tests pass a MockTransport).
        s3_client: Pre-built S3 client (tests pass a mock).

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="FileRelay API",
        description=(
            "Downloads a document by URL, forwards it to a document-extraction "
            "service, and returns the structured result or a link to it."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Services ──────────────────────────────────────────────────────────
    # Built here rather than in lifespan so they exist even when the ASGI
    # server (or a test transport) does not send lifespan events.
    http_client = httpx.AsyncClient(transport=transport, follow_redirects=True)
    app.state.settings = settings
    app.state.http_client = http_client
    app.state.relay_service = build_relay_service(settings, http_client, s3_client=s3_client)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(relay.router)
    app.include_router(health.router)

    return app


# uvicorn expects `filerelay.main:app` to be importable
app = create_app()
