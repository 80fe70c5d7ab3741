"""
Per-user tracked collections (the "document store").

`TrackingService` handles the write side used by the API; `SQLDocumentStore`
is the read side consumed by the progress aggregator.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from preventa.core.exceptions import MalformedRecordError, NotFoundError
from preventa.core.logging import get_logger
from preventa.database import SessionFactory, SessionLocal
from preventa.models import (
    ActionPlan,
    CheckIn,
    LearningSession,
    Meal,
    Medication,
    MedicationLog,
    QuizCompletion,
    VisualPhoto,
)
from preventa.schemas.tracking import (
    ActionPlanCreate,
    ActionPlanRecord,
    CheckInCreate,
    LearningSessionCreate,
    MealCreate,
    MedicationCreate,
    MedicationLogCreate,
    QuizCompletionCreate,
    VisualPhotoCreate,
)
from preventa.services.dates import local_day_bounds, to_storage, utc_now
from preventa.services.health import HealthService

logger = get_logger(__name__)

T = TypeVar("T")


class TrackingService:
    """Write side of the tracked collections."""

    def __init__(self, db: Session, health_service: Optional[HealthService] = None):
        self.db = db
        self.health_service = health_service

    def _add(self, record: T) -> T:
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def _owned(self, model: Any, uid: str, record_id: Any) -> Any:
        record = self.db.query(model).filter(model.id == record_id, model.uid == uid).first()
        if record is None:
            raise NotFoundError(model.__name__, record_id)
        return record

    def _delete(self, model: Any, uid: str, record_id: Any) -> None:
        record = self._owned(model, uid, record_id)
        self.db.delete(record)
        self.db.commit()

    # Meals

    def add_meal(self, uid: str, data: MealCreate) -> Meal:
        meal = self._add(
            Meal(
                uid=uid,
                name=data.name,
                calories=data.calories,
                protein=data.protein,
                carbs=data.carbs,
                fat=data.fat,
                image_url=data.image_url,
                meal_type=data.meal_type.value,
                timestamp=to_storage(data.timestamp or utc_now()),
            )
        )
        # Meals also count toward the health provider's dietary energy
        if self.health_service is not None:
            self.health_service.record_sample(
                uid,
                "dietary_energy",
                data.calories,
                unit="kcal",
                recorded_at=meal.timestamp,
                source="meal",
            )
        logger.info("meal_added", uid=uid, meal_id=meal.id, calories=meal.calories)
        return meal

    def list_meals(self, uid: str, now: Optional[datetime] = None) -> list[Meal]:
        start, end = local_day_bounds(now or utc_now())
        return (
            self.db.query(Meal)
            .filter(Meal.uid == uid, Meal.timestamp >= start, Meal.timestamp < end)
            .order_by(Meal.timestamp.desc())
            .all()
        )

    def todays_calories(self, uid: str, now: Optional[datetime] = None) -> int:
        start, end = local_day_bounds(now or utc_now())
        total = (
            self.db.query(func.sum(Meal.calories))
            .filter(Meal.uid == uid, Meal.timestamp >= start, Meal.timestamp < end)
            .scalar()
        )
        return int(total or 0)

    def delete_meal(self, uid: str, meal_id: str) -> None:
        self._delete(Meal, uid, meal_id)

    # Medications

    def add_medication(self, uid: str, data: MedicationCreate) -> Medication:
        return self._add(
            Medication(
                uid=uid,
                name=data.name,
                dosage=data.dosage,
                frequency=data.frequency,
                is_critical=data.is_critical,
            )
        )

    def list_medications(self, uid: str) -> list[Medication]:
        return self.db.query(Medication).filter(Medication.uid == uid).order_by(Medication.name).all()

    def delete_medication(self, uid: str, medication_id: int) -> None:
        self._delete(Medication, uid, medication_id)

    def log_dose(self, uid: str, data: MedicationLogCreate) -> MedicationLog:
        self._owned(Medication, uid, data.medication_id)
        return self._add(
            MedicationLog(
                uid=uid,
                medication_id=data.medication_id,
                timestamp=to_storage(data.timestamp or utc_now()),
            )
        )

    def list_doses(self, uid: str, now: Optional[datetime] = None) -> list[MedicationLog]:
        start, end = local_day_bounds(now or utc_now())
        return (
            self.db.query(MedicationLog)
            .filter(
                MedicationLog.uid == uid,
                MedicationLog.timestamp >= start,
                MedicationLog.timestamp < end,
            )
            .order_by(MedicationLog.timestamp.desc())
            .all()
        )

    # Check-ins

    def add_check_in(self, uid: str, data: CheckInCreate) -> CheckIn:
        return self._add(
            CheckIn(
                uid=uid,
                mood=data.mood,
                energy=data.energy,
                note=data.note,
                timestamp=to_storage(data.timestamp or utc_now()),
            )
        )

    def list_check_ins(self, uid: str, limit: int = 30) -> list[CheckIn]:
        return (
            self.db.query(CheckIn)
            .filter(CheckIn.uid == uid)
            .order_by(CheckIn.timestamp.desc())
            .limit(limit)
            .all()
        )

    # Visual check photos

    def add_visual_photo(self, uid: str, data: VisualPhotoCreate) -> VisualPhoto:
        return self._add(
            VisualPhoto(
                uid=uid,
                category=data.category,
                image_url=data.image_url,
                notes=data.notes,
                created_at=to_storage(data.created_at or utc_now()),
            )
        )

    def list_visual_photos(self, uid: str, category: Optional[str] = None) -> list[VisualPhoto]:
        query = self.db.query(VisualPhoto).filter(VisualPhoto.uid == uid)
        if category:
            query = query.filter(VisualPhoto.category == category)
        return query.order_by(VisualPhoto.created_at.desc()).all()

    def delete_visual_photo(self, uid: str, photo_id: int) -> None:
        self._delete(VisualPhoto, uid, photo_id)

    # Learning

    def add_quiz_completion(self, uid: str, data: QuizCompletionCreate) -> QuizCompletion:
        return self._add(
            QuizCompletion(
                uid=uid,
                quiz_id=data.quiz_id,
                score=data.score,
                completed_at=to_storage(data.completed_at or utc_now()),
            )
        )

    def list_quiz_completions(self, uid: str) -> list[QuizCompletion]:
        return (
            self.db.query(QuizCompletion)
            .filter(QuizCompletion.uid == uid)
            .order_by(QuizCompletion.completed_at.desc())
            .all()
        )

    def add_learning_session(self, uid: str, data: LearningSessionCreate) -> LearningSession:
        return self._add(
            LearningSession(
                uid=uid,
                topic=data.topic,
                minutes=data.minutes,
                started_at=to_storage(data.started_at or utc_now()),
            )
        )

    # Action plans

    def add_action_plan(self, uid: str, data: ActionPlanCreate) -> ActionPlan:
        return self._add(
            ActionPlan(
                uid=uid,
                title=data.title,
                description=data.description,
                due_date=to_storage(data.due_date),
            )
        )

    def list_action_plans(self, uid: str) -> list[ActionPlan]:
        return (
            self.db.query(ActionPlan)
            .filter(ActionPlan.uid == uid)
            .order_by(ActionPlan.due_date)
            .all()
        )

    def complete_action_plan(
        self, uid: str, plan_id: str, now: Optional[datetime] = None
    ) -> ActionPlan:
        plan = self._owned(ActionPlan, uid, plan_id)
        plan.is_completed = True
        plan.completed_at = to_storage(now or utc_now())
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def delete_action_plan(self, uid: str, plan_id: str) -> None:
        self._delete(ActionPlan, uid, plan_id)


class SQLDocumentStore:
    """Read side used by the progress aggregator.

    Every call opens its own session in the default executor so the
    aggregator's branches can run concurrently.
    """

    def __init__(self, session_factory: SessionFactory = SessionLocal):
        self._session_factory = session_factory

    async def _run(self, fn: Callable[[Session], T]) -> T:
        def _work() -> T:
            with self._session_factory() as db:
                return fn(db)

        return await asyncio.get_running_loop().run_in_executor(None, _work)

    async def _count_since(self, model: Any, column: Any, uid: str, since: datetime) -> int:
        return await self._run(
            lambda db: db.query(func.count(model.id))
            .filter(model.uid == uid, column > since)
            .scalar()
            or 0
        )

    async def count_quiz_completions(self, uid: str, since: datetime) -> int:
        return await self._count_since(QuizCompletion, QuizCompletion.completed_at, uid, since)

    async def learning_minutes(self, uid: str, since: datetime) -> float:
        total = await self._run(
            lambda db: db.query(func.sum(LearningSession.minutes))
            .filter(LearningSession.uid == uid, LearningSession.started_at > since)
            .scalar()
        )
        return float(total or 0.0)

    async def count_visual_photos(self, uid: str, since: datetime) -> int:
        return await self._count_since(VisualPhoto, VisualPhoto.created_at, uid, since)

    async def count_medications(self, uid: str) -> int:
        return await self._run(
            lambda db: db.query(func.count(Medication.id)).filter(Medication.uid == uid).scalar()
            or 0
        )

    async def count_medication_logs(self, uid: str, since: datetime) -> int:
        return await self._count_since(MedicationLog, MedicationLog.timestamp, uid, since)

    async def count_check_ins(self, uid: str, since: datetime) -> int:
        return await self._count_since(CheckIn, CheckIn.timestamp, uid, since)

    async def action_plans_due(
        self, uid: str, start: datetime, end: datetime
    ) -> list[ActionPlanRecord]:
        """Plans due in (start, end); rows that fail to parse are skipped."""
        rows = await self._run(
            lambda db: db.query(ActionPlan)
            .filter(
                ActionPlan.uid == uid,
                ActionPlan.due_date > start,
                ActionPlan.due_date < end,
            )
            .all()
        )

        plans = []
        for row in rows:
            try:
                plans.append(parse_action_plan(row))
            except MalformedRecordError as e:
                logger.warning("malformed_record_skipped", collection=e.collection, error=e.message)
        return plans


def parse_action_plan(row: Any) -> ActionPlanRecord:
    try:
        return ActionPlanRecord.model_validate(row)
    except PydanticValidationError as e:
        raise MalformedRecordError("action_plans", getattr(row, "id", None), str(e))
