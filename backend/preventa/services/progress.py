"""
Daily Progress Aggregator.

Combines six independently sourced category scores (health, learning,
visual checks, medication adherence, action plans, check-ins) into a single
weighted score in [0, 1].

Each category score is a pure function of the data fetched for it. The
fetches run concurrently; a category whose fetch fails scores 0 and the
rest of the aggregation proceeds.
"""

import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Mapping, Sequence
from datetime import date, datetime
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from preventa.config import get_settings
from preventa.core.exceptions import AuthenticationError, DataFetchError
from preventa.core.logging import get_logger
from preventa.schemas.health import HealthMetrics
from preventa.schemas.progress import ProgressCategory, ProgressReport
from preventa.schemas.tracking import ActionPlanRecord
from preventa.services.dates import ensure_aware, local_date, local_day_bounds, utc_now

logger = get_logger(__name__)

CATEGORY_WEIGHTS: dict[ProgressCategory, float] = {
    ProgressCategory.HEALTH: 0.40,
    ProgressCategory.LEARNING: 0.15,
    ProgressCategory.VISUAL: 0.10,
    ProgressCategory.MEDICATION: 0.15,
    ProgressCategory.ACTION_PLANS: 0.10,
    ProgressCategory.CHECKINS: 0.10,
}

# Health sub-score: four equally weighted goals plus a heart-rate bonus
HEALTH_COMPONENT_WEIGHT = 0.25
HEART_RATE_BONUS = 0.05

EXPECTED_DOSES_PER_MEDICATION = 2


class HealthDataProvider(Protocol):
    async def fetch_snapshot(self, uid: str, now: datetime) -> HealthMetrics: ...


class DocumentStore(Protocol):
    async def count_quiz_completions(self, uid: str, since: datetime) -> int: ...

    async def learning_minutes(self, uid: str, since: datetime) -> float: ...

    async def count_visual_photos(self, uid: str, since: datetime) -> int: ...

    async def count_medications(self, uid: str) -> int: ...

    async def count_medication_logs(self, uid: str, since: datetime) -> int: ...

    async def action_plans_due(
        self, uid: str, start: datetime, end: datetime
    ) -> list[ActionPlanRecord]: ...

    async def count_check_ins(self, uid: str, since: datetime) -> int: ...


# =============================================================================
# Category score functions
# =============================================================================


def health_score(metrics: HealthMetrics) -> float:
    """Average of steps, active calories, sleep and water progress.

    A recorded heart rate adds a small bonus to both the score and the
    maximum, so the result stays normalized to [0, 1].
    """
    components = (
        metrics.steps_progress,
        min(1.0, metrics.active_calories / metrics.active_calories_goal),
        min(1.0, metrics.sleep_hours / metrics.sleep_hours_goal),
        metrics.water_progress,
    )

    score = 0.0
    max_score = 0.0
    for progress in components:
        score += progress * HEALTH_COMPONENT_WEIGHT
        max_score += HEALTH_COMPONENT_WEIGHT

    if metrics.heart_rate_bpm > 0:
        score += HEART_RATE_BONUS
        max_score += HEART_RATE_BONUS

    return score / max_score if max_score > 0 else 0.0


def learning_score(quiz_completions: int, learning_minutes: float) -> float:
    if quiz_completions >= 3:
        return 1.0
    if quiz_completions == 2:
        return 0.5
    if quiz_completions == 1:
        return 0.25

    # No quiz finished today: credit time spent learning instead
    minutes = int(learning_minutes)
    if minutes >= 30:
        return 0.75
    if minutes >= 15:
        return 0.50
    if minutes >= 5:
        return 0.25
    return 0.0


def visual_score(photo_count: int) -> float:
    if photo_count >= 2:
        return 1.0
    if photo_count == 1:
        return 0.5
    return 0.0


def medication_score(medication_count: int, dose_count: int) -> float:
    """Adherence against two expected doses per tracked medication.

    Users who track no medications are not penalized.
    """
    if medication_count <= 0:
        return 1.0

    expected = medication_count * EXPECTED_DOSES_PER_MEDICATION
    if dose_count >= expected:
        return 1.0
    if dose_count >= expected // 2:
        return 0.75
    if dose_count >= 1:
        return 0.5
    return min(1.0, dose_count / medication_count)


def completed_on(plan: ActionPlanRecord, day: date, tz: ZoneInfo) -> bool:
    if plan.completed_at is not None:
        return local_date(plan.completed_at, tz) == day
    return plan.is_completed


def action_plan_score(
    plans_due: Sequence[ActionPlanRecord], now: datetime, tz: Optional[ZoneInfo] = None
) -> float:
    """Share of today's plans completed today; 1.0 when nothing is due."""
    if not plans_due:
        return 1.0
    tz = tz or get_settings().tz
    today = local_date(now, tz)
    completed = sum(1 for plan in plans_due if completed_on(plan, today, tz))
    return completed / len(plans_due)


def check_in_score(check_in_count: int) -> float:
    if check_in_count >= 2:
        return 1.0
    if check_in_count == 1:
        return 0.5
    return 0.0


def weighted_progress(scores: Mapping[ProgressCategory, float]) -> float:
    """Weighted sum of category scores, clamped to [0, 1].

    Categories missing from ``scores`` contribute 0.
    """
    total = sum(
        scores.get(category, 0.0) * weight for category, weight in CATEGORY_WEIGHTS.items()
    )
    return min(1.0, max(0.0, total))


# =============================================================================
# Aggregation
# =============================================================================


class ProgressCalculator:
    """Fan-out/fan-in aggregation of the six category scores for one user."""

    def __init__(
        self,
        health_provider: HealthDataProvider,
        document_store: DocumentStore,
        tz: Optional[ZoneInfo] = None,
    ):
        self.health_provider = health_provider
        self.document_store = document_store
        self.tz = tz or get_settings().tz

    async def compute_daily_progress(self, uid: str, now: Optional[datetime] = None) -> float:
        report = await self.calculate(uid, now)
        return report.score

    async def calculate(self, uid: str, now: Optional[datetime] = None) -> ProgressReport:
        if not uid:
            raise AuthenticationError("No authenticated user for progress calculation")

        now = ensure_aware(now or utc_now())
        start, end = local_day_bounds(now, self.tz)

        branches: dict[ProgressCategory, Awaitable[float]] = {
            ProgressCategory.HEALTH: self._health(uid, now),
            ProgressCategory.LEARNING: self._learning(uid, start),
            ProgressCategory.VISUAL: self._visual(uid, start),
            ProgressCategory.MEDICATION: self._medication(uid, start),
            ProgressCategory.ACTION_PLANS: self._action_plans(uid, start, end, now),
            ProgressCategory.CHECKINS: self._check_ins(uid, start),
        }

        results = await asyncio.gather(*branches.values(), return_exceptions=True)

        scores: dict[ProgressCategory, float] = {}
        failed: list[ProgressCategory] = []
        for category, result in zip(branches, results):
            if isinstance(result, Exception):
                error = DataFetchError(category.value, str(result))
                logger.warning(
                    "category_fetch_failed",
                    uid=uid,
                    category=error.category,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                scores[category] = 0.0
                failed.append(category)
            elif isinstance(result, BaseException):
                raise result
            else:
                scores[category] = min(1.0, max(0.0, result))

        report = ProgressReport(
            uid=uid,
            score=weighted_progress(scores),
            categories=scores,
            failed_categories=failed,
            computed_at=now,
        )
        logger.info(
            "daily_progress_calculated",
            uid=uid,
            score=round(report.score, 4),
            failed_categories=[c.value for c in failed],
        )
        return report

    async def _health(self, uid: str, now: datetime) -> float:
        metrics = await self.health_provider.fetch_snapshot(uid, now)
        return health_score(metrics)

    async def _learning(self, uid: str, since: datetime) -> float:
        completions = await self.document_store.count_quiz_completions(uid, since)
        if completions > 0:
            return learning_score(completions, 0.0)
        minutes = await self.document_store.learning_minutes(uid, since)
        return learning_score(0, minutes)

    async def _visual(self, uid: str, since: datetime) -> float:
        return visual_score(await self.document_store.count_visual_photos(uid, since))

    async def _medication(self, uid: str, since: datetime) -> float:
        medication_count = await self.document_store.count_medications(uid)
        if medication_count == 0:
            return medication_score(0, 0)
        doses = await self.document_store.count_medication_logs(uid, since)
        return medication_score(medication_count, doses)

    async def _action_plans(
        self, uid: str, start: datetime, end: datetime, now: datetime
    ) -> float:
        plans = await self.document_store.action_plans_due(uid, start, end)
        return action_plan_score(plans, now, self.tz)

    async def _check_ins(self, uid: str, since: datetime) -> float:
        return check_in_score(await self.document_store.count_check_ins(uid, since))


class ProgressTracker:
    """Holds the latest published progress report per user.

    Refreshes are last-write-wins: starting a refresh cancels any older one
    still in flight for the same user, and a result is only published if no
    newer refresh has started since, so scores never arrive out of order.
    """

    def __init__(self, calculator: ProgressCalculator):
        self.calculator = calculator
        self._latest: dict[str, ProgressReport] = {}
        self._generation: dict[str, int] = defaultdict(int)
        self._inflight: dict[str, asyncio.Task] = {}

    def latest(self, uid: str) -> Optional[ProgressReport]:
        return self._latest.get(uid)

    async def refresh(self, uid: str, now: Optional[datetime] = None) -> Optional[ProgressReport]:
        """Recompute and publish a user's progress.

        If a newer refresh supersedes this one before it finishes, waits for
        the newest one instead and returns its report.
        """
        self._generation[uid] += 1
        generation = self._generation[uid]

        previous = self._inflight.get(uid)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(self.calculator.calculate(uid, now))
        self._inflight[uid] = task

        try:
            report = await task
        except asyncio.CancelledError:
            if generation == self._generation[uid]:
                raise
            logger.debug("progress_refresh_superseded", uid=uid, generation=generation)
            return await self._newest_report(uid)
        finally:
            if self._inflight.get(uid) is task:
                del self._inflight[uid]

        if generation != self._generation[uid]:
            logger.debug("progress_refresh_superseded", uid=uid, generation=generation)
            return await self._newest_report(uid)

        self._latest[uid] = report
        return report

    async def _newest_report(self, uid: str) -> Optional[ProgressReport]:
        # The in-flight task always belongs to the current generation
        while True:
            task = self._inflight.get(uid)
            if task is None:
                return self._latest.get(uid)
            generation = self._generation[uid]
            try:
                report = await asyncio.shield(task)
            except asyncio.CancelledError:
                if task.cancelled():
                    # Let the cancelled refresh clear its slot
                    await asyncio.sleep(0)
                    continue
                raise
            if generation == self._generation[uid]:
                return report


# Singleton instance
_progress_tracker: Optional[ProgressTracker] = None


def get_progress_tracker() -> ProgressTracker:
    """Get or create the process-wide progress tracker."""
    global _progress_tracker
    if _progress_tracker is None:
        from preventa.services.health import HealthService
        from preventa.services.tracking import SQLDocumentStore

        _progress_tracker = ProgressTracker(
            ProgressCalculator(HealthService(), SQLDocumentStore())
        )
    return _progress_tracker
