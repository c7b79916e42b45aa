"""Health Checks — liveness, and readiness of the pieces every lending request needs.

Invariants:
    - GET /api/v1/health/ is 200 whenever the process serves requests
    - GET /api/v1/health/ready is 503 unless the database answers AND a signing
      key is loaded; the body names each failing check
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from shelfshare import __version__
from shelfshare.api.dependencies import get_token_service
from shelfshare.core.errors import ShelfShareError
from shelfshare.infrastructure import database
from shelfshare.infrastructure.observability import SERVICE_NAME

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}


async def _database_ready() -> bool:
    manager = database.db_manager
    return bool(manager) and await manager.health_check()


def _signing_ready() -> bool:
    try:
        get_token_service()
    except ShelfShareError as e:
        logger.error(f"Signing key unavailable: {e.message}")
        return False
    return True


@router.get("/ready")
async def readiness():
    checks = {
        "database": "healthy" if await _database_ready() else "unavailable",
        "signing_key": "healthy" if _signing_ready() else "unavailable",
    }
    if any(v != "healthy" for v in checks.values()):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
