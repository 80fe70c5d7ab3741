"""User profile endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends

from preventa.api.deps import get_current_account, get_user_service
from preventa.models import User
from preventa.schemas.user import ProfileResponse, ProfileUpdate
from preventa.services.progress import ProgressTracker, get_progress_tracker
from preventa.services.users import UserService

router = APIRouter()


@router.get("", response_model=ProfileResponse)
async def get_profile(
    account: User = Depends(get_current_account),
    users: UserService = Depends(get_user_service),
) -> ProfileResponse:
    return users.to_profile(account)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    update: ProfileUpdate,
    background_tasks: BackgroundTasks,
    account: User = Depends(get_current_account),
    users: UserService = Depends(get_user_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> ProfileResponse:
    """
    Update profile fields.

    Goals feed today's health score, so progress is refreshed afterwards.
    A water goal outside 8-200 oz is clamped into range.
    """
    user = users.update_profile(account.uid, update)
    background_tasks.add_task(tracker.refresh, user.uid)
    return users.to_profile(user)
