"""
System health API endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
import logging

from ecoplay.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    summary="Health Check",
    description="Simple health check for load balancers. Returns 200 if the database answers."
)
async def health(db: AsyncSession = Depends(get_db)):
    try:
        result = await db.execute(text("SELECT 1"))
        _ = result.scalar()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(
            status_code=503,
            detail={"status": "unhealthy", "timestamp": datetime.utcnow().isoformat()}
        )

    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }


# Probes for k8s
@router.get("/ready")
async def ready():
    """Readiness probe endpoint."""
    return {"status": "ready"}


@router.get("/live")
async def live():
    """Liveness probe endpoint."""
    return {"status": "alive"}
