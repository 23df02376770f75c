"""AI Co-Founder Backend: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# CRITICAL ORDER: configure_structlog MUST be called before all other cofounder imports
# to avoid the structlog cache pitfall (structlog caches the processor chain on first use).
from cofounder.core.logging import configure_structlog
from cofounder.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cofounder.api.routes import api_router
from cofounder.core.config import get_settings
from cofounder.core.exceptions import ConfigurationError, LLMGatewayError
from cofounder.db import init_db, close_db
from cofounder.middleware.correlation import (
    setup_correlation_middleware,
    get_correlation_id,
)
from cofounder.services.llm_gateway import gateway_error_status

logger = structlog.get_logger(__name__)


def validate_secrets() -> None:
    """Fail fast if a required secret is missing at startup."""
    settings = get_settings()
    if settings.debug:
        return  # Skip in dev/test mode
    missing = settings.missing_secrets()
    if missing:
        raise RuntimeError(f"Missing required secrets at startup: {[name.upper() for name in missing]}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Graceful shutdown flag: SIGTERM flips it so the health check returns 503
    app.state.shutting_down = False

    def handle_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="health_check_503_draining_connections")

    signal.signal(signal.SIGTERM, handle_sigterm)

    # Startup
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    validate_secrets()
    logger.info("secrets_validated")

    await init_db()
    logger.info("db_initialized")

    yield

    # Shutdown
    logger.info("shutdown_begin")
    await close_db()
    logger.info("shutdown_complete")


def _error_response(request: Request, status_code: int, message, event: str, **fields) -> JSONResponse:
    debug_id = str(uuid.uuid4())
    logger.error(
        event,
        status_code=status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        **fields,
    )
    return JSONResponse(status_code=status_code, content={"detail": message, "debug_id": debug_id})


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Global exception handler for HTTPException with debug_id tracking.

    Logs errors server-side with full context, returns sanitized response to client.
    """
    return _error_response(request, exc.status_code, exc.detail, "http_exception", detail=exc.detail)


async def llm_gateway_exception_handler(request: Request, exc: LLMGatewayError) -> JSONResponse:
    """Upstream LLM failures: 429 and 402 propagate, anything else is a 500.

    The upstream body is logged, never returned.
    """
    status_code, message = gateway_error_status(exc)
    return _error_response(
        request,
        status_code,
        message,
        "llm_gateway_request_failed",
        upstream_status=exc.status_code,
    )


async def configuration_exception_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """A missing secret is fatal for the request: 500 naming the setting."""
    return _error_response(request, 500, str(exc), "configuration_error", setting=exc.setting)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors with debug_id tracking.

    Logs full exception with traceback, returns generic 500 to client.
    """
    return _error_response(
        request,
        500,
        "Internal server error",
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(LLMGatewayError)(llm_gateway_exception_handler)
    app.exception_handler(ConfigurationError)(configuration_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="AI Co-Founder - context-aware chat, idea validation and planning for solo founders",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, *settings.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    register_exception_handlers(app)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cofounder.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
