"""
Liveness and Firestore connectivity probes for PakAir deployments.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status

from app.config.firebase import get_db
from app.core.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": _now(),
    }


@router.get("/db")
async def database_health():
    """
    Round trip to the document store (collection listing).
    Responds 503 when the store cannot be reached.
    """
    started = time.perf_counter()
    try:
        collections = list(get_db().collections())
    except Exception as e:
        logger.error(f"❌ Database health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database connection failed: {e}",
        )

    return {
        "status": "healthy",
        "database": "mock" if settings.USE_MOCK_DB else "firestore",
        "connected": True,
        "collections_count": len(collections),
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "timestamp": _now(),
    }
