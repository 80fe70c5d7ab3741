"""Daily progress endpoints."""

from fastapi import APIRouter, Depends

from preventa.api.deps import get_current_uid
from preventa.core.exceptions import NotFoundError
from preventa.schemas.progress import ProgressReport
from preventa.services.progress import ProgressTracker, get_progress_tracker

router = APIRouter()


@router.get("/today", response_model=ProgressReport)
async def get_today_progress(
    uid: str = Depends(get_current_uid),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> ProgressReport:
    """
    Recompute today's progress and publish it.

    If a newer refresh for the same user starts meanwhile, the newer report
    is returned instead.
    """
    report = await tracker.refresh(uid)
    if report is None:
        raise NotFoundError("ProgressReport", uid)
    return report


@router.get("/latest", response_model=ProgressReport)
async def get_latest_progress(
    uid: str = Depends(get_current_uid),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> ProgressReport:
    """Last published report, without recomputing."""
    report = tracker.latest(uid)
    if report is None:
        raise NotFoundError("ProgressReport", uid)
    return report
