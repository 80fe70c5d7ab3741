"""Health check endpoints for monitoring service status."""

import asyncio
import time
from enum import Enum
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from preventa.config import get_settings
from preventa.database import get_db
from preventa.services.openai_service import get_ai_service

router = APIRouter(tags=["health"])


class HealthStatus(str, Enum):
    """Health status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class DependencyHealth(BaseModel):
    """Health status of a single dependency."""
    status: HealthStatus
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Full health check response."""
    status: HealthStatus
    version: str
    dependencies: Dict[str, DependencyHealth]


async def check_database(db: Session) -> DependencyHealth:
    """Check database connectivity."""
    try:
        start = time.perf_counter()
        db.execute(text("SELECT 1"))
        latency = (time.perf_counter() - start) * 1000
        return DependencyHealth(
            status=HealthStatus.HEALTHY,
            latency_ms=round(latency, 2),
        )
    except Exception as e:
        return DependencyHealth(
            status=HealthStatus.UNHEALTHY,
            message=str(e),
        )


async def check_llm() -> DependencyHealth:
    """Narrative insights are optional, so a missing LLM only degrades."""
    if not get_settings().ai_insights_enabled:
        return DependencyHealth(status=HealthStatus.HEALTHY, message="AI insights disabled")
    if not get_ai_service().is_configured:
        return DependencyHealth(
            status=HealthStatus.DEGRADED,
            message="OpenAI API key not configured",
        )
    return DependencyHealth(status=HealthStatus.HEALTHY)


@router.get("/health", response_model=HealthResponse)
async def health_check(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Health check with dependency status.

    - database: PostgreSQL connection (required)
    - llm: OpenAI configuration for narrative insights (optional)
    """
    db_health, llm_health = await asyncio.gather(
        check_database(db),
        check_llm(),
    )

    dependencies = {
        "database": db_health,
        "llm": llm_health,
    }

    if db_health.status == HealthStatus.UNHEALTHY:
        overall = HealthStatus.UNHEALTHY
    elif any(d.status != HealthStatus.HEALTHY for d in dependencies.values()):
        overall = HealthStatus.DEGRADED
    else:
        overall = HealthStatus.HEALTHY

    return HealthResponse(
        status=overall,
        version="0.1.0",
        dependencies=dependencies,
    )


@router.get("/health/live")
async def liveness():
    """
    Liveness probe - is the application running?

    This endpoint always returns 200 if the app is responding.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness(db: Session = Depends(get_db)):
    """
    Readiness probe - can the app handle traffic?

    Returns 503 if the database is unreachable.
    """
    db_health = await check_database(db)

    if db_health.status == HealthStatus.UNHEALTHY:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": db_health.message},
        )

    return {"status": "ready"}
