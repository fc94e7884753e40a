"""
Readiness probes for ``/health/detailed``.

Each probe returns a ``ProbeResult``; ``run_probes`` runs them in order and
reports the worst status as the overall one.
"""

import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

import structlog
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.models.rbac import Role

logger = structlog.get_logger()


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


_SEVERITY = {HealthStatus.HEALTHY: 0, HealthStatus.DEGRADED: 1, HealthStatus.UNHEALTHY: 2}


@dataclass
class ProbeResult:
    status: HealthStatus
    latency_ms: Optional[float] = None
    detail: Optional[str] = None


Probe = Callable[[], Awaitable[ProbeResult]]


async def probe_database(db: AsyncSession, slow_ms: float = 100) -> ProbeResult:
    """``SELECT 1`` round-trip; slow answers count as degraded."""
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("health.database_failed", error=str(e))
        return ProbeResult(HealthStatus.UNHEALTHY, detail=type(e).__name__)

    elapsed = round((time.perf_counter() - start) * 1000, 2)
    if elapsed >= slow_ms:
        return ProbeResult(HealthStatus.DEGRADED, elapsed, "slow response")
    return ProbeResult(HealthStatus.HEALTHY, elapsed)


async def probe_default_role(db: AsyncSession, role_name: Optional[str]) -> ProbeResult:
    """Signup grants ``role_name``; warn when it is missing or deactivated."""
    if not role_name:
        return ProbeResult(HealthStatus.HEALTHY, detail="no default role configured")

    found = await db.scalar(
        select(Role.id).where(Role.name == role_name, Role.deleted_at.is_(None))
    )
    if found is None:
        return ProbeResult(HealthStatus.DEGRADED, detail=f"default role '{role_name}' is not active")
    return ProbeResult(HealthStatus.HEALTHY)


async def run_probes(probes: dict[str, Probe]) -> tuple[HealthStatus, dict[str, dict]]:
    """Run ``probes`` sequentially; a probe that raises is unhealthy."""
    report: dict[str, dict] = {}
    overall = HealthStatus.HEALTHY
    for name, probe in probes.items():
        try:
            outcome = await probe()
        except Exception as e:
            logger.error("health.probe_crashed", probe=name, error=str(e))
            outcome = ProbeResult(HealthStatus.UNHEALTHY, detail=type(e).__name__)
        report[name] = asdict(outcome)
        if _SEVERITY[outcome.status] > _SEVERITY[overall]:
            overall = outcome.status
    return overall, report
