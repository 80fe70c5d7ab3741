"""Tests for the health data provider."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.orm import Session, sessionmaker

from preventa.core.exceptions import ValidationError
from preventa.models import User
from preventa.services.health import (
    HealthService,
    clamp_water_goal,
    convert_value,
    normalize_metric,
)

NOW = datetime(2025, 3, 14, 15, 0, tzinfo=timezone.utc)
NEW_YORK = ZoneInfo("America/New_York")


@pytest.fixture
def utc_health(session_factory: sessionmaker) -> HealthService:
    return HealthService(session_factory, tz=ZoneInfo("UTC"))


class TestNormalization:
    def test_metric_aliases(self):
        assert normalize_metric("stepCount") == "steps"
        assert normalize_metric("activeEnergyBurned") == "active_energy"
        assert normalize_metric("body_mass") == "weight"

    def test_unknown_metric(self):
        with pytest.raises(ValidationError):
            normalize_metric("blood_oxygen")

    def test_unit_conversion(self):
        assert convert_value("weight", 100, "kg") == pytest.approx(220.462)
        assert convert_value("height", 180, "cm") == pytest.approx(70.866, rel=1e-4)
        assert convert_value("active_energy", 418.4, "kJ") == pytest.approx(100)
        assert convert_value("water", 12, "oz") == 12
        assert convert_value("steps", 500, None) == 500

    def test_unconvertible_unit(self):
        with pytest.raises(ValidationError):
            convert_value("steps", 10, "km")

    @pytest.mark.parametrize("goal,expected", [(2, 8), (64, 64), (500, 200)])
    def test_water_goal_clamp(self, goal, expected):
        assert clamp_water_goal(goal) == expected


class TestSnapshot:
    def test_sums_only_todays_samples(self, utc_health: HealthService, user: User):
        utc_health.record_sample(user.uid, "steps", 3000, recorded_at=NOW.replace(hour=9))
        utc_health.record_sample(user.uid, "steps", 2000, recorded_at=NOW.replace(hour=14))
        utc_health.record_sample(user.uid, "steps", 9000, recorded_at=NOW - timedelta(hours=16))
        utc_health.record_sample(user.uid, "steps", 500, recorded_at=NOW + timedelta(hours=1))

        metrics = utc_health.get_snapshot(user.uid, NOW)
        assert metrics.steps == 5000

    def test_day_starts_at_local_midnight(self, session_factory: sessionmaker, user: User):
        health = HealthService(session_factory, tz=NEW_YORK)
        # 03:00 UTC is still the previous evening in New York
        health.record_sample(user.uid, "steps", 4000, recorded_at=datetime(2025, 3, 14, 3, 0, tzinfo=timezone.utc))
        health.record_sample(user.uid, "steps", 1000, recorded_at=datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc))

        assert health.get_snapshot(user.uid, NOW).steps == 1000

    def test_heart_rate_is_latest_today(self, utc_health: HealthService, user: User):
        utc_health.record_sample(user.uid, "heart_rate", 80, recorded_at=NOW.replace(hour=8))
        utc_health.record_sample(user.uid, "heart_rate", 62, recorded_at=NOW.replace(hour=13))
        assert utc_health.get_snapshot(user.uid, NOW).heart_rate_bpm == 62

    def test_yesterdays_heart_rate_is_ignored(self, utc_health: HealthService, user: User):
        utc_health.record_sample(user.uid, "heart_rate", 70, recorded_at=NOW - timedelta(days=1))
        assert utc_health.get_snapshot(user.uid, NOW).heart_rate_bpm == 0

    def test_latest_weight_sample_wins_over_profile(self, utc_health: HealthService, test_db: Session, user: User):
        user.weight_lbs = 180
        test_db.commit()
        assert utc_health.get_snapshot(user.uid, NOW).weight_lbs == 180

        utc_health.record_sample(user.uid, "weight", 80, unit="kg", recorded_at=NOW - timedelta(days=3))
        assert utc_health.get_snapshot(user.uid, NOW).weight_lbs == pytest.approx(176.37, rel=1e-3)

    def test_sleep_is_clipped_to_last_24_hours(self, utc_health: HealthService, user: User):
        utc_health.record_sleep(user.uid, NOW - timedelta(hours=30), NOW - timedelta(hours=20), "deep")
        utc_health.record_sleep(user.uid, NOW - timedelta(hours=10), NOW - timedelta(hours=8), "in_bed")
        assert utc_health.get_snapshot(user.uid, NOW).sleep_hours == pytest.approx(4.0)

    def test_invalid_sleep_session(self, utc_health: HealthService, user: User):
        with pytest.raises(ValidationError):
            utc_health.record_sleep(user.uid, NOW, NOW - timedelta(hours=1))
        with pytest.raises(ValidationError):
            utc_health.record_sleep(user.uid, NOW - timedelta(hours=1), NOW, "napping")

    def test_profile_goals(self, utc_health: HealthService, test_db: Session, user: User):
        user.steps_goal = 8000
        user.water_goal_oz = 300
        test_db.commit()

        metrics = utc_health.get_snapshot(user.uid, NOW)
        assert metrics.steps_goal == 8000
        assert metrics.water_goal_oz == 200

    def test_unknown_user_gets_default_goals(self, utc_health: HealthService):
        metrics = utc_health.get_snapshot("missing", NOW)
        assert metrics.steps_goal == 10000
        assert metrics.water_goal_oz == 64

    def test_add_water(self, utc_health: HealthService, user: User):
        utc_health.add_water(user.uid, 8, NOW - timedelta(hours=2))
        assert utc_health.add_water(user.uid, 12, NOW) == 20

        with pytest.raises(ValidationError):
            utc_health.add_water(user.uid, 0, NOW)

    @pytest.mark.asyncio
    async def test_fetch_snapshot_runs_off_loop(self, utc_health: HealthService, user: User):
        utc_health.record_sample(user.uid, "active_energy", 320, recorded_at=NOW.replace(hour=10))
        metrics = await utc_health.fetch_snapshot(user.uid, NOW)
        assert metrics.active_calories == 320


class TestWeeklySteps:
    def test_groups_by_day_for_last_seven_days(self, utc_health: HealthService, user: User):
        for days_ago, steps in [(0, 1000), (0, 500), (2, 4000), (6, 7000), (7, 9999)]:
            utc_health.record_sample(
                user.uid, "steps", steps, recorded_at=NOW - timedelta(days=days_ago, hours=1)
            )

        weekly = utc_health.get_weekly_steps(user.uid, NOW)
        assert weekly == {
            date(2025, 3, 8): 7000,
            date(2025, 3, 12): 4000,
            date(2025, 3, 14): 1500,
        }
        assert list(weekly) == sorted(weekly)

    def test_snapshot_carries_weekly_series(self, utc_health: HealthService, user: User):
        utc_health.record_sample(user.uid, "steps", 2500, recorded_at=NOW - timedelta(days=1))
        metrics = utc_health.get_snapshot(user.uid, NOW)
        assert metrics.weekly_steps == {date(2025, 3, 13): 2500}
