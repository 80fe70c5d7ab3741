"""Endpoints for the tracked collections that feed daily progress."""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status

from preventa.api.deps import get_current_uid, get_tracking_service
from preventa.schemas.tracking import (
    ActionPlanCreate,
    ActionPlanRecord,
    CheckInCreate,
    CheckInResponse,
    LearningSessionCreate,
    LearningSessionResponse,
    MealCreate,
    MealResponse,
    MealsTodayResponse,
    MedicationCreate,
    MedicationLogCreate,
    MedicationLogResponse,
    MedicationResponse,
    QuizCompletionCreate,
    QuizCompletionResponse,
    VisualPhotoCreate,
    VisualPhotoResponse,
)
from preventa.services.progress import ProgressTracker, get_progress_tracker
from preventa.services.tracking import TrackingService

router = APIRouter()


# =============================================================================
# Meals
# =============================================================================


@router.get("/meals", response_model=MealsTodayResponse)
async def list_meals(
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
) -> MealsTodayResponse:
    """Today's meals with their calorie total."""
    return MealsTodayResponse(
        meals=[MealResponse.model_validate(m) for m in tracking.list_meals(uid)],
        todays_calories=tracking.todays_calories(uid),
    )


@router.post("/meals", response_model=MealResponse, status_code=status.HTTP_201_CREATED)
async def add_meal(
    meal: MealCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.add_meal(uid, meal)
    background_tasks.add_task(tracker.refresh, uid)
    return record


@router.delete("/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meal(
    meal_id: str,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
):
    tracking.delete_meal(uid, meal_id)


# =============================================================================
# Medications
# =============================================================================


@router.get("/medications", response_model=list[MedicationResponse])
async def list_medications(
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
):
    return tracking.list_medications(uid)


@router.post("/medications", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
async def add_medication(
    medication: MedicationCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.add_medication(uid, medication)
    background_tasks.add_task(tracker.refresh, uid)
    return record


@router.delete("/medications/{medication_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_medication(
    medication_id: int,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    tracking.delete_medication(uid, medication_id)
    background_tasks.add_task(tracker.refresh, uid)


@router.get("/medication-logs", response_model=list[MedicationLogResponse])
async def list_medication_logs(
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
):
    """Doses logged today."""
    return tracking.list_doses(uid)


@router.post("/medication-logs", response_model=MedicationLogResponse, status_code=status.HTTP_201_CREATED)
async def log_dose(
    dose: MedicationLogCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.log_dose(uid, dose)
    background_tasks.add_task(tracker.refresh, uid)
    return record


# =============================================================================
# Check-ins
# =============================================================================


@router.get("/check-ins", response_model=list[CheckInResponse])
async def list_check_ins(
    limit: int = 30,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
):
    return tracking.list_check_ins(uid, limit=limit)


@router.post("/check-ins", response_model=CheckInResponse, status_code=status.HTTP_201_CREATED)
async def add_check_in(
    check_in: CheckInCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.add_check_in(uid, check_in)
    background_tasks.add_task(tracker.refresh, uid)
    return record


# =============================================================================
# Visual check photos
# =============================================================================


@router.get("/visual-photos", response_model=list[VisualPhotoResponse])
async def list_visual_photos(
    category: Optional[str] = None,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
):
    return tracking.list_visual_photos(uid, category)


@router.post("/visual-photos", response_model=VisualPhotoResponse, status_code=status.HTTP_201_CREATED)
async def add_visual_photo(
    photo: VisualPhotoCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.add_visual_photo(uid, photo)
    background_tasks.add_task(tracker.refresh, uid)
    return record


@router.delete("/visual-photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_visual_photo(
    photo_id: int,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    tracking.delete_visual_photo(uid, photo_id)
    background_tasks.add_task(tracker.refresh, uid)


# =============================================================================
# Learning
# =============================================================================


@router.get("/quiz-completions", response_model=list[QuizCompletionResponse])
async def list_quiz_completions(
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
):
    return tracking.list_quiz_completions(uid)


@router.post("/quiz-completions", response_model=QuizCompletionResponse, status_code=status.HTTP_201_CREATED)
async def add_quiz_completion(
    completion: QuizCompletionCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.add_quiz_completion(uid, completion)
    background_tasks.add_task(tracker.refresh, uid)
    return record


@router.post("/learning-sessions", response_model=LearningSessionResponse, status_code=status.HTTP_201_CREATED)
async def add_learning_session(
    session: LearningSessionCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.add_learning_session(uid, session)
    background_tasks.add_task(tracker.refresh, uid)
    return record


# =============================================================================
# Action plans
# =============================================================================


@router.get("/action-plans", response_model=list[ActionPlanRecord])
async def list_action_plans(
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
):
    return tracking.list_action_plans(uid)


@router.post("/action-plans", response_model=ActionPlanRecord, status_code=status.HTTP_201_CREATED)
async def add_action_plan(
    plan: ActionPlanCreate,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.add_action_plan(uid, plan)
    background_tasks.add_task(tracker.refresh, uid)
    return record


@router.post("/action-plans/{plan_id}/complete", response_model=ActionPlanRecord)
async def complete_action_plan(
    plan_id: str,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    record = tracking.complete_action_plan(uid, plan_id)
    background_tasks.add_task(tracker.refresh, uid)
    return record


@router.delete("/action-plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_action_plan(
    plan_id: str,
    background_tasks: BackgroundTasks,
    uid: str = Depends(get_current_uid),
    tracking: TrackingService = Depends(get_tracking_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    tracking.delete_action_plan(uid, plan_id)
    background_tasks.add_task(tracker.refresh, uid)
