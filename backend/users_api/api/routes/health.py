"""Health & Diagnostics — liveness, readiness, and the non-production DB probe.

Invariants:
    - GET /health always returns 200 {status, timestamp} if the process is up
    - GET /health/ready returns 503 if the database is unreachable
    - GET /test-db exists only outside production (router included conditionally)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from
      the load balancer
    - /test-db reports its own failure body instead of the error envelope:
      it is an operator probe, not part of the public API
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import users_api.infrastructure.database as database
from users_api.infrastructure.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])
diagnostics_router = APIRouter(tags=["diagnostics"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness probe — includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}


@diagnostics_router.get("/test-db")
async def test_database_connection(db: AsyncSession = Depends(get_db)):
    """Round-trip a trivial query and report which database answered."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database probe failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e)},
        )
    return {"status": "connected", "database": db.bind.url.database}
