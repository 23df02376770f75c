import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness check; 503 once shutdown has begun."""
    if getattr(request.app.state, "shutting_down", False):
        return JSONResponse(
            status_code=503,
            content={"status": "shutting_down", "service": "cofounder-api"},
        )
    return {"status": "healthy", "service": "cofounder-api"}


@router.get("/ready")
async def readiness_check():
    """Readiness check - verifies the database is reachable and secrets are configured."""
    from cofounder.core.config import get_settings
    from cofounder.db.base import session_scope

    checks = {"database": False, "secrets": False}

    try:
        async with session_scope() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))

    missing = get_settings().missing_secrets()
    checks["secrets"] = not missing
    if missing:
        logger.error("secrets_health_check_failed", missing=missing)

    all_healthy = all(checks.values())
    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content={"status": "ready" if all_healthy else "degraded", "checks": checks},
    )
