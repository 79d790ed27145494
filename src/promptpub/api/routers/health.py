"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from pydantic import BaseModel
import structlog

from ...core.config import settings
from ...core.database import check_database_health

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/health", tags=["🏥 Health Monitoring"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    service: str
    timestamp: str
    version: str = settings.app_version
    environment: str = settings.environment


class DetailedHealthResponse(HealthResponse):
    """Detailed health check response model."""
    components: Dict[str, bool]
    details: Dict[str, Any]


@router.get("/",
            response_model=HealthResponse,
            summary="💚 Basic Health Check",
            description="""
**Quick health check endpoint for load balancers and monitoring.**

Returns basic service status information:
- ✅ Service availability
- 🏷️ Service version and environment
- ⏰ Current timestamp
            """)
async def health_check() -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        Health status information
    """
    return HealthResponse(
        status="healthy",
        service="promptpub",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@router.get("/detailed",
            response_model=DetailedHealthResponse,
            summary="🔍 Detailed Health Check",
            description="""
**Health check including the database connection.**

**Status Levels:**
- `healthy` - Database reachable
- `unhealthy` - Database disconnected or failing
            """)
async def detailed_health_check() -> DetailedHealthResponse:
    """Detailed health check endpoint.

    Returns:
        Health status with per-component details
    """
    database = await check_database_health()
    database_ok = database.get("status") == "healthy"

    if not database_ok:
        logger.warning("Database health check failed", **database)

    return DetailedHealthResponse(
        status="healthy" if database_ok else "unhealthy",
        service="promptpub",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        components={"database": database_ok},
        details={"database": database},
    )
