"""Tests for the daily progress aggregator."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from preventa.core.exceptions import AuthenticationError
from preventa.schemas.health import HealthMetrics
from preventa.schemas.progress import ProgressCategory, ProgressReport
from preventa.schemas.tracking import ActionPlanRecord
from preventa.services.progress import (
    CATEGORY_WEIGHTS,
    ProgressCalculator,
    ProgressTracker,
    action_plan_score,
    check_in_score,
    health_score,
    learning_score,
    medication_score,
    visual_score,
    weighted_progress,
)

UTC = ZoneInfo("UTC")
NOW = datetime(2025, 3, 14, 15, 0, tzinfo=timezone.utc)

PERFECT_METRICS = HealthMetrics(
    steps=10000,
    heart_rate_bpm=68,
    sleep_hours=8.0,
    active_calories=500,
    water_oz=64.0,
)


class FakeHealthProvider:
    def __init__(self, metrics: HealthMetrics = PERFECT_METRICS, error: Optional[Exception] = None):
        self.metrics = metrics
        self.error = error

    async def fetch_snapshot(self, uid: str, now: datetime) -> HealthMetrics:
        if self.error is not None:
            raise self.error
        return self.metrics


class FakeDocumentStore:
    """In-memory store; every category defaults to a perfect day."""

    def __init__(self, failing: tuple[str, ...] = (), **values):
        self.values = {
            "count_quiz_completions": 3,
            "learning_minutes": 0.0,
            "count_visual_photos": 2,
            "count_medications": 0,
            "count_medication_logs": 0,
            "action_plans_due": [],
            "count_check_ins": 2,
            **values,
        }
        self.failing = failing
        self.calls: list[str] = []

    async def _get(self, name: str):
        self.calls.append(name)
        if name in self.failing:
            raise ConnectionError(f"{name} unavailable")
        return self.values[name]

    async def count_quiz_completions(self, uid, since):
        return await self._get("count_quiz_completions")

    async def learning_minutes(self, uid, since):
        return await self._get("learning_minutes")

    async def count_visual_photos(self, uid, since):
        return await self._get("count_visual_photos")

    async def count_medications(self, uid):
        return await self._get("count_medications")

    async def count_medication_logs(self, uid, since):
        return await self._get("count_medication_logs")

    async def action_plans_due(self, uid, start, end):
        return await self._get("action_plans_due")

    async def count_check_ins(self, uid, since):
        return await self._get("count_check_ins")


def _plan(completed_at: Optional[datetime] = None, is_completed: bool = False) -> ActionPlanRecord:
    return ActionPlanRecord(
        id="plan",
        title="Walk",
        due_date=NOW,
        is_completed=is_completed,
        completed_at=completed_at,
    )


class TestCategoryScores:
    """Pure per-category scoring rules."""

    def test_weights_sum_to_one(self):
        assert sum(CATEGORY_WEIGHTS.values()) == pytest.approx(1.0)
        assert set(CATEGORY_WEIGHTS) == set(ProgressCategory)

    def test_health_score_all_goals_met(self):
        assert health_score(PERFECT_METRICS) == pytest.approx(1.0)

    def test_health_score_without_heart_rate(self):
        metrics = PERFECT_METRICS.model_copy(update={"heart_rate_bpm": 0})
        assert health_score(metrics) == pytest.approx(1.0)

    def test_health_score_partial(self):
        assert health_score(HealthMetrics(steps=5000)) == pytest.approx(0.125)

    def test_health_score_heart_rate_bonus_only(self):
        assert health_score(HealthMetrics(heart_rate_bpm=70)) == pytest.approx(0.05 / 1.05)

    def test_health_score_uses_custom_goals(self):
        metrics = HealthMetrics(steps=5000, steps_goal=5000)
        assert health_score(metrics) == pytest.approx(0.25)

    @pytest.mark.parametrize(
        "quizzes,minutes,expected",
        [
            (3, 0, 1.0),
            (5, 0, 1.0),
            (2, 0, 0.5),
            (1, 45, 0.25),
            (0, 30, 0.75),
            (0, 15, 0.5),
            (0, 5, 0.25),
            (0, 4.9, 0.0),
            (0, 0, 0.0),
        ],
    )
    def test_learning_score(self, quizzes, minutes, expected):
        assert learning_score(quizzes, minutes) == expected

    @pytest.mark.parametrize("photos,expected", [(0, 0.0), (1, 0.5), (2, 1.0), (7, 1.0)])
    def test_visual_score(self, photos, expected):
        assert visual_score(photos) == expected

    @pytest.mark.parametrize(
        "medications,doses,expected",
        [
            (0, 0, 1.0),
            (2, 4, 1.0),
            (2, 5, 1.0),
            (2, 2, 0.75),
            (2, 1, 0.5),
            (2, 0, 0.0),
            (1, 1, 0.75),
        ],
    )
    def test_medication_score(self, medications, doses, expected):
        assert medication_score(medications, doses) == expected

    @pytest.mark.parametrize("check_ins,expected", [(0, 0.0), (1, 0.5), (2, 1.0), (3, 1.0)])
    def test_check_in_score(self, check_ins, expected):
        assert check_in_score(check_ins) == expected

    def test_no_plans_due_is_full_score(self):
        assert action_plan_score([], NOW, UTC) == 1.0

    def test_plan_completion_ratio(self):
        plans = [_plan(completed_at=NOW - timedelta(hours=1)), _plan()]
        assert action_plan_score(plans, NOW, UTC) == 0.5

    def test_plan_completed_yesterday_does_not_count(self):
        plans = [_plan(completed_at=NOW - timedelta(days=1), is_completed=True)]
        assert action_plan_score(plans, NOW, UTC) == 0.0

    def test_plan_flagged_complete_without_timestamp(self):
        assert action_plan_score([_plan(is_completed=True)], NOW, UTC) == 1.0

    def test_weighted_progress_missing_categories_count_as_zero(self):
        assert weighted_progress({ProgressCategory.HEALTH: 1.0}) == pytest.approx(0.40)

    def test_weighted_progress_is_clamped(self):
        scores = {category: 2.0 for category in ProgressCategory}
        assert weighted_progress(scores) == 1.0


class TestProgressCalculator:
    """Concurrent aggregation across the six categories."""

    @pytest.mark.asyncio
    async def test_perfect_day(self):
        calculator = ProgressCalculator(FakeHealthProvider(), FakeDocumentStore(), tz=UTC)
        report = await calculator.calculate("user-1", NOW)

        assert report.score == pytest.approx(1.0)
        assert report.failed_categories == []
        assert report.percent == 100

    @pytest.mark.asyncio
    async def test_compute_daily_progress_returns_score(self):
        calculator = ProgressCalculator(FakeHealthProvider(), FakeDocumentStore(), tz=UTC)
        assert await calculator.compute_daily_progress("user-1", NOW) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_failed_category_scores_zero(self):
        store = FakeDocumentStore(failing=("count_quiz_completions",))
        calculator = ProgressCalculator(FakeHealthProvider(), store, tz=UTC)

        report = await calculator.calculate("user-1", NOW)

        assert report.score == pytest.approx(0.85)
        assert report.categories[ProgressCategory.LEARNING] == 0.0
        assert report.failed_categories == [ProgressCategory.LEARNING]

    @pytest.mark.asyncio
    async def test_failed_health_provider(self):
        provider = FakeHealthProvider(error=TimeoutError("health store timed out"))
        calculator = ProgressCalculator(provider, FakeDocumentStore(), tz=UTC)

        report = await calculator.calculate("user-1", NOW)

        assert report.score == pytest.approx(0.60)
        assert ProgressCategory.HEALTH in report.failed_categories

    @pytest.mark.asyncio
    async def test_everything_failing_scores_zero(self):
        store = FakeDocumentStore(failing=tuple(FakeDocumentStore().values))
        provider = FakeHealthProvider(error=RuntimeError("down"))
        calculator = ProgressCalculator(provider, store, tz=UTC)

        report = await calculator.calculate("user-1", NOW)

        assert report.score == 0.0
        assert set(report.failed_categories) == set(ProgressCategory)

    @pytest.mark.asyncio
    async def test_empty_uid_is_rejected_before_fetching(self):
        store = FakeDocumentStore()
        calculator = ProgressCalculator(FakeHealthProvider(), store, tz=UTC)

        with pytest.raises(AuthenticationError):
            await calculator.calculate("", NOW)
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_learning_minutes_only_read_without_quizzes(self):
        store = FakeDocumentStore()
        await ProgressCalculator(FakeHealthProvider(), store, tz=UTC).calculate("user-1", NOW)
        assert "learning_minutes" not in store.calls

        store = FakeDocumentStore(count_quiz_completions=0, learning_minutes=20.0)
        report = await ProgressCalculator(FakeHealthProvider(), store, tz=UTC).calculate("user-1", NOW)
        assert "learning_minutes" in store.calls
        assert report.categories[ProgressCategory.LEARNING] == 0.5

    @pytest.mark.asyncio
    async def test_dose_logs_skipped_without_medications(self):
        store = FakeDocumentStore()
        await ProgressCalculator(FakeHealthProvider(), store, tz=UTC).calculate("user-1", NOW)
        assert "count_medication_logs" not in store.calls

    @pytest.mark.asyncio
    async def test_action_plans_scored_against_now(self):
        plans = [_plan(completed_at=NOW), _plan(), _plan(), _plan()]
        store = FakeDocumentStore(action_plans_due=plans)
        report = await ProgressCalculator(FakeHealthProvider(), store, tz=UTC).calculate("user-1", NOW)
        assert report.categories[ProgressCategory.ACTION_PLANS] == 0.25


class BlockingCalculator:
    """Calculator whose first call blocks until released."""

    def __init__(self):
        self.calls = 0
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def calculate(self, uid: str, now: Optional[datetime] = None) -> ProgressReport:
        self.calls += 1
        call = self.calls
        if call == 1:
            self.started.set()
            await self.release.wait()
        return ProgressReport(uid=uid, score=call / 10, categories={}, computed_at=NOW)


class TestProgressTracker:
    """Publishing of refreshed reports."""

    @pytest.mark.asyncio
    async def test_latest_is_none_before_refresh(self):
        tracker = ProgressTracker(ProgressCalculator(FakeHealthProvider(), FakeDocumentStore(), tz=UTC))
        assert tracker.latest("user-1") is None

    @pytest.mark.asyncio
    async def test_refresh_publishes(self):
        tracker = ProgressTracker(ProgressCalculator(FakeHealthProvider(), FakeDocumentStore(), tz=UTC))
        report = await tracker.refresh("user-1", NOW)
        assert tracker.latest("user-1") == report

    @pytest.mark.asyncio
    async def test_newer_refresh_supersedes_older(self):
        calculator = BlockingCalculator()
        tracker = ProgressTracker(calculator)

        first = asyncio.create_task(tracker.refresh("user-1"))
        await calculator.started.wait()

        second = await tracker.refresh("user-1")
        assert second.score == pytest.approx(0.2)
        assert (await first) == second
        assert tracker.latest("user-1").score == pytest.approx(0.2)

    @pytest.mark.asyncio
    async def test_users_refresh_independently(self):
        calculator = BlockingCalculator()
        tracker = ProgressTracker(calculator)

        first = asyncio.create_task(tracker.refresh("user-1"))
        await calculator.started.wait()

        other = await tracker.refresh("user-2")
        calculator.release.set()

        assert (await first).uid == "user-1"
        assert other.uid == "user-2"
        assert tracker.latest("user-1") is not None

    @pytest.mark.asyncio
    async def test_chain_of_refreshes_all_resolve_to_newest(self):
        calculator = GatedCalculator()
        tracker = ProgressTracker(calculator)

        first = asyncio.create_task(tracker.refresh("user-1"))
        await calculator.entered[1].wait()
        second = asyncio.create_task(tracker.refresh("user-1"))
        await calculator.entered[2].wait()
        third = asyncio.create_task(tracker.refresh("user-1"))
        await calculator.entered[3].wait()

        calculator.gates[3].set()
        results = await asyncio.gather(first, second, third)

        assert [r.score for r in results] == [pytest.approx(0.3)] * 3
        assert tracker.latest("user-1").score == pytest.approx(0.3)


class GatedCalculator:
    """Calculator where call N waits on gates[N]."""

    def __init__(self, calls: int = 3):
        self.calls = 0
        self.entered = {n: asyncio.Event() for n in range(1, calls + 1)}
        self.gates = {n: asyncio.Event() for n in range(1, calls + 1)}

    async def calculate(self, uid: str, now: Optional[datetime] = None) -> ProgressReport:
        self.calls += 1
        call = self.calls
        self.entered[call].set()
        await self.gates[call].wait()
        return ProgressReport(uid=uid, score=call / 10, categories={}, computed_at=NOW)
