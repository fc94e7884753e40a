"""
Liveness and readiness endpoints (mounted outside ``/api``).
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.api.dependencies.database import get_db
from securegate.core.config import settings
from securegate.utils.health import HealthStatus, probe_database, probe_default_role, run_probes

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """Liveness probe for load balancers; never touches the database."""
    return {
        "status": HealthStatus.HEALTHY.value,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/health/detailed")
async def health_detailed(db: AsyncSession = Depends(get_db)):
    overall, components = await run_probes(
        {
            "database": lambda: probe_database(db),
            "default_role": lambda: probe_default_role(db, settings.auth.default_role),
        }
    )
    return JSONResponse(
        status_code=200 if overall is not HealthStatus.UNHEALTHY else 503,
        content={
            "status": overall.value,
            "version": settings.app_version,
            "environment": settings.environment,
            "components": components,
        },
    )
