"""Health insight endpoints."""

from fastapi import APIRouter, Depends

from preventa.api.deps import get_current_uid, get_health_service
from preventa.config import get_settings
from preventa.core.exceptions import NotFoundError
from preventa.core.logging import get_logger
from preventa.schemas.insights import InsightsResponse, NarrativeInsightResponse
from preventa.services.dates import utc_now
from preventa.services.health import HealthService
from preventa.services.insights import generate_insights
from preventa.services.openai_service import AIService, get_ai_service

router = APIRouter()
logger = get_logger(__name__)


@router.get("", response_model=InsightsResponse)
async def get_insights(
    uid: str = Depends(get_current_uid),
    health: HealthService = Depends(get_health_service),
) -> InsightsResponse:
    """Rule-based insights for today's metrics, highest priority first."""
    metrics = await health.fetch_snapshot(uid, utc_now())
    insights = generate_insights(metrics, metrics.weekly_steps)
    logger.debug("insights_generated", uid=uid, count=len(insights))
    return InsightsResponse(insights=insights)


@router.post("/narrative", response_model=NarrativeInsightResponse)
async def get_narrative_insight(
    uid: str = Depends(get_current_uid),
    health: HealthService = Depends(get_health_service),
    ai: AIService = Depends(get_ai_service),
) -> NarrativeInsightResponse:
    """
    Free-text coaching note from the LLM.

    Disabled unless AI_INSIGHTS_ENABLED is set.
    """
    if not get_settings().ai_insights_enabled:
        raise NotFoundError("Feature", "ai_insights")

    metrics = await health.fetch_snapshot(uid, utc_now())
    trends = ", ".join(f"{day.isoformat()}: {steps} steps" for day, steps in metrics.weekly_steps.items())
    narrative = await ai.generate_health_insight(metrics, trends or None)
    return NarrativeInsightResponse(narrative=narrative, model=ai.model)
