"""Health check endpoints."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.clock import utcnow
from traveltrek.database import get_db

router = APIRouter()


@router.get("/health")
async def health_check(request: Request, db: AsyncSession = Depends(get_db)) -> dict:
    """
    Health check endpoint for load balancers and monitoring.

    Checks database connectivity and reports the in-memory stores.
    """
    checks = {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "checks": {},
    }

    # Database check
    try:
        await db.execute(text("SELECT 1"))
        checks["checks"]["database"] = "ok"
    except SQLAlchemyError as e:
        checks["checks"]["database"] = f"error: {str(e)}"
        checks["status"] = "unhealthy"

    for name in ("otp_store", "rate_limiter"):
        store = getattr(request.app.state, name, None)
        if store is None:
            checks["checks"][name] = "missing"
            checks["status"] = "unhealthy"
        else:
            checks["checks"][name] = {
                "entries": len(store.backend),
                "sweeper": "running" if store.backend.running else "stopped",
            }

    return checks


@router.get("/ready")
async def readiness_check() -> dict:
    """Readiness check for Kubernetes/Railway."""
    return {"status": "ready"}
