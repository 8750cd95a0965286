"""
Storefront Backend - FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings) builds every collaborator,
       stores it on app.state, registers middleware, exception handlers
       and routers, and returns the app.
Who:   uvicorn (uvicorn app.main:app) and the test suite
       (create_app(test_settings)).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌──────────┐ ┌──────────┐ ┌───────────┐  │
    │  │  Req ID  │→│ Logging  │→│ Rate Limit │→│ GZip/CORS │  │
    │  └────────────┘ └──────────┘ └──────────┘ └───────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  /auth  /product(s)  /collection(s)  /upload  /health    │
    │                                                          │
    │  app.state:                                              │
    │  settings, database, codec, tokens, categories,          │
    │  image_host, *_service                                   │
    │                                                          │
    │  Exception Handlers:                                     │
    │  StorefrontError→own status │ RequestValidation→400 │    │
    │  Exception→500                                           │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (logged, not fatal)
    3. Create the upload staging and category directories

    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings
from app.database import Database
from app.exceptions import StorefrontError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import auth, collections, health, products, upload
from app.services.auth_service import AuthService
from app.services.category_registry import CategoryRegistry
from app.services.collection_service import CollectionService
from app.services.credential_codec import CredentialCodec
from app.services.file_service import FileService
from app.services.image_host import ImageHostService
from app.services.product_service import ProductService
from app.services.token_service import TokenIssuer
from app.services.upload_service import UploadService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger once, at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("cloudinary").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Storefront Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: health checks and catalog reads still work; the
        # affected endpoints fail with explicit errors.
        logger.error("Configuration error: %s", str(e))

    for directory in (Path(settings.upload_tmp_dir), settings.categories_path.parent):
        directory.mkdir(parents=True, exist_ok=True)
    logger.info("Upload staging directory: %s", Path(settings.upload_tmp_dir).resolve())
    logger.info("Category registry: %s", settings.categories_path.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Storefront Backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, **extra) -> dict:
    return {
        "success": False,
        "error": error,
        "message": message,
        **extra,
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the error envelope.

    Handler hierarchy:
        StorefrontError subclasses → their own status_code / error_code
        RequestValidationError     → 400 (malformed JSON or wrong types)
        Exception (fallback)       → 500 with a generic message

    StorefrontError messages are written to be client-safe; `context` is
    logged and never returned. Stack traces stay server-side.
    """

    @app.exception_handler(StorefrontError)
    async def handle_storefront_error(request: Request, exc: StorefrontError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid,
                type(exc).__name__,
                exc.message,
                exc.context,
            )
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, **exc.payload),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", rid, details)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Invalid request body", details=details),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_state(app: FastAPI, settings: Settings) -> None:
    """Construct every collaborator once and attach it to app.state."""
    state = app.state
    state.settings = settings
    state.database = Database.from_settings(settings)
    state.codec = CredentialCodec.from_settings(settings)
    state.tokens = TokenIssuer.from_settings(settings)
    state.categories = CategoryRegistry(settings.categories_path)
    state.image_host = ImageHostService.from_settings(settings)
    state.files = FileService.from_settings(settings)

    state.auth_service = AuthService(state.codec, state.tokens)
    state.product_service = ProductService(state.categories)
    state.collection_service = CollectionService()
    state.upload_service = UploadService(state.files, state.image_host)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to build from. Defaults to Settings(), which
                  reads the environment and .env.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Storefront API",
        description=(
            "E-commerce backend: authentication, product catalog, collections "
            "and product image upload."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    build_state(app, settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executed in reverse order of addition: RequestID runs first, so
    # rejected requests still get an id.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(collections.router)
    app.include_router(upload.router)
    app.include_router(health.router)

    return app


# uvicorn app.main:app
app = create_app()
