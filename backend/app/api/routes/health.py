"""Health & Readiness Probes - liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /api/v1/health always returns 200 if process is up (liveness), with registered models
    - GET /api/v1/health/ready returns 503 if database is unreachable (readiness)
    - Router is included before the record routes so "health" never resolves as a model
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_registry
from app.infrastructure import database
from app.services.engine_registry import EngineRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check(registry: EngineRegistry = Depends(get_registry)):
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "ok",
        "service": "record-store-api",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "models": registry.names(),
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe - includes database connectivity."""
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
