"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, status

from dutch_payroll.api.dependencies import Registry
from dutch_payroll.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(registry: Registry) -> HealthResponse:
    """Check API health and the loaded rate tables."""
    years = registry.years
    return HealthResponse(
        status="healthy" if years else "degraded",
        timestamp=datetime.now(timezone.utc),
        rate_tables=years,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    """Readiness check for container orchestration."""
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
