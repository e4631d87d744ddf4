"""Health check endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from payrail import __version__
from payrail.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Return service health status."""
    return {"status": "healthy", "service": "payrail", "version": __version__}


@router.get("/health/live")
async def liveness():
    """Liveness probe: always 200 while the process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness(request: Request):
    """Readiness probe: checks database connectivity and provider configuration."""
    checks: dict[str, str] = {}
    overall_ok = True

    try:
        session_factory = request.app.state.db_session_factory
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:
        checks["database"] = f"error: {exc}"
        overall_ok = False

    custody = getattr(request.app.state, "custody_client", None)
    if custody is None:
        checks["custody"] = "disabled"
        overall_ok = False
    elif not settings.custody_api_key or not settings.custody_wallet_id:
        checks["custody"] = "not_configured"
        overall_ok = False
    else:
        checks["custody"] = "configured"

    status_code = 200 if overall_ok else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if overall_ok else "not_ready",
            "checks": checks,
        },
    )
