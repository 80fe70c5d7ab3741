"""Health data provider endpoints: daily snapshot, weekly steps and uploads."""

from fastapi import APIRouter, BackgroundTasks, Depends, status

from preventa.api.deps import get_current_uid, get_health_service
from preventa.schemas.health import (
    DailySteps,
    HealthMetrics,
    HealthSampleCreate,
    HealthSampleResponse,
    HealthSummaryResponse,
    SleepSessionCreate,
    WaterIntakeCreate,
    WaterIntakeResponse,
    WeeklyStepsResponse,
)
from preventa.services.dates import utc_now
from preventa.services.health import HealthService
from preventa.services.progress import ProgressTracker, get_progress_tracker

router = APIRouter()


@router.get("/today", response_model=HealthMetrics)
async def get_today(
    uid: str = Depends(get_current_uid),
    health: HealthService = Depends(get_health_service),
) -> HealthMetrics:
    """Today's metrics snapshot."""
    return await health.fetch_snapshot(uid, utc_now())


@router.get("/weekly-steps", response_model=WeeklyStepsResponse)
async def get_weekly_steps(
    uid: str = Depends(get_current_uid),
    health: HealthService = Depends(get_health_service),
) -> WeeklyStepsResponse:
    """Step totals for the last seven local days, oldest first."""
    weekly = await health.fetch_weekly_steps(uid, utc_now())
    return WeeklyStepsResponse(days=[DailySteps(date=day, steps=steps) for day, steps in weekly.items()])


@router.get("/summary", response_model=HealthSummaryResponse)
async def get_summary(
    uid: str = Depends(get_current_uid),
    health: HealthService = Depends(get_health_service),
) -> HealthSummaryResponse:
    metrics = await health.fetch_snapshot(uid, utc_now())
    return HealthSummaryResponse(summary=metrics.summary(), metrics=metrics)


@router.post("/samples", response_model=HealthSampleResponse, status_code=status.HTTP_201_CREATED)
async def upload_sample(
    sample: HealthSampleCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    health: HealthService = Depends(get_health_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> HealthSampleResponse:
    """
    Store a quantity sample.

    Metric aliases (e.g. ``stepCount``, ``dietaryWater``) and metric units are
    normalized to canonical names and imperial units.
    """
    record = health.record_sample(
        uid,
        sample.metric,
        sample.value,
        unit=sample.unit,
        recorded_at=sample.recorded_at,
        source=sample.source,
    )
    background_tasks.add_task(tracker.refresh, uid)
    return HealthSampleResponse.model_validate(record)


@router.post("/sleep", status_code=status.HTTP_201_CREATED)
async def upload_sleep(
    session: SleepSessionCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    health: HealthService = Depends(get_health_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = health.record_sleep(uid, session.start, session.end, session.stage)
    background_tasks.add_task(tracker.refresh, uid)
    return {"id": record.id, "stage": record.stage, "start": record.start, "end": record.end}


@router.post("/water", response_model=WaterIntakeResponse)
async def add_water(
    intake: WaterIntakeCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    health: HealthService = Depends(get_health_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> WaterIntakeResponse:
    """Log a drink and return today's running total."""
    now = utc_now()
    total = health.add_water(uid, intake.ounces, now)
    snapshot = await health.fetch_snapshot(uid, now)
    background_tasks.add_task(tracker.refresh, uid)
    return WaterIntakeResponse(
        todays_intake_oz=total,
        goal_oz=snapshot.water_goal_oz,
        progress=snapshot.water_progress,
    )
