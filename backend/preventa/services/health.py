"""
Health Data Provider.

Stores quantity samples and sleep sessions uploaded by the mobile client
(HealthKit / Health Auto Export style) and reads them back as a daily
`HealthMetrics` snapshot and a weekly steps series.
"""

import asyncio
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func
from sqlalchemy.orm import Session

from preventa.config import get_settings
from preventa.core.exceptions import ValidationError
from preventa.core.logging import get_logger
from preventa.database import SessionFactory, SessionLocal
from preventa.models import HealthSample, SleepSession, User
from preventa.schemas.health import MAX_WATER_GOAL_OZ, MIN_WATER_GOAL_OZ, HealthMetrics
from preventa.services.dates import (
    ensure_aware,
    local_date,
    local_day_bounds,
    local_midnight,
    to_storage,
    utc_now,
)

logger = get_logger(__name__)

# Unit conversion constants (metric to imperial)
ML_PER_FLOZ = 29.5735
KG_TO_LBS = 2.20462
CM_TO_INCHES = 0.393701
KJ_PER_KCAL = 4.184

# Mapping from HealthKit / Health Auto Export metric names to internal names
METRIC_NAME_MAP = {
    "steps": "steps",
    "step_count": "steps",
    "stepCount": "steps",
    "heart_rate": "heart_rate",
    "heartRate": "heart_rate",
    "active_energy": "active_energy",
    "active_energy_burned": "active_energy",
    "activeEnergyBurned": "active_energy",
    "dietary_energy": "dietary_energy",
    "dietary_energy_consumed": "dietary_energy",
    "dietaryEnergyConsumed": "dietary_energy",
    "dietaryEnergy": "dietary_energy",
    "water": "water",
    "dietary_water": "water",
    "dietaryWater": "water",
    "weight": "weight",
    "body_mass": "weight",
    "bodyMass": "weight",
    "weight_body_mass": "weight",
    "height": "height",
    "body_height": "height",
}

CANONICAL_UNITS = {
    "steps": "count",
    "heart_rate": "bpm",
    "active_energy": "kcal",
    "dietary_energy": "kcal",
    "water": "fl_oz",
    "weight": "lb",
    "height": "in",
}

# (metric, unit) -> converter into the canonical unit
UNIT_CONVERSIONS = {
    ("water", "ml"): lambda v: v / ML_PER_FLOZ,
    ("water", "mL"): lambda v: v / ML_PER_FLOZ,
    ("water", "l"): lambda v: v * 1000 / ML_PER_FLOZ,
    ("water", "L"): lambda v: v * 1000 / ML_PER_FLOZ,
    ("weight", "kg"): lambda v: v * KG_TO_LBS,
    ("height", "cm"): lambda v: v * CM_TO_INCHES,
    ("height", "m"): lambda v: v * 100 * CM_TO_INCHES,
    ("active_energy", "kJ"): lambda v: v / KJ_PER_KCAL,
    ("active_energy", "kj"): lambda v: v / KJ_PER_KCAL,
    ("dietary_energy", "kJ"): lambda v: v / KJ_PER_KCAL,
    ("dietary_energy", "kj"): lambda v: v / KJ_PER_KCAL,
}

# Units that already mean the canonical unit
UNIT_ALIASES = {
    "count": {"count", "steps"},
    "bpm": {"bpm", "count/min"},
    "kcal": {"kcal", "Cal", "cal"},
    "fl_oz": {"fl_oz", "oz", "fl_oz_us"},
    "lb": {"lb", "lbs"},
    "in": {"in", "inch", "inches"},
}

SLEEP_STAGES = {"asleep", "in_bed", "core", "deep", "rem", "awake"}
ASLEEP_STAGES = {"asleep", "core", "deep", "rem"}

WEEKLY_DAYS = 7


def normalize_metric(name: str) -> str:
    metric = METRIC_NAME_MAP.get(name)
    if metric is None:
        raise ValidationError("metric", f"unsupported metric '{name}'")
    return metric


def convert_value(metric: str, value: float, unit: Optional[str]) -> float:
    """Convert a reading into the canonical unit for its metric."""
    canonical = CANONICAL_UNITS[metric]
    if unit is None or unit in UNIT_ALIASES[canonical]:
        return value
    converter = UNIT_CONVERSIONS.get((metric, unit))
    if converter is None:
        raise ValidationError("unit", f"cannot convert '{unit}' for {metric}")
    return converter(value)


def clamp_water_goal(ounces: float) -> float:
    return max(MIN_WATER_GOAL_OZ, min(MAX_WATER_GOAL_OZ, ounces))


class HealthService:
    """Health data provider backed by uploaded samples."""

    def __init__(
        self,
        session_factory: SessionFactory = SessionLocal,
        tz: Optional[ZoneInfo] = None,
    ):
        self._session_factory = session_factory
        self._settings = get_settings()
        self.tz = tz or self._settings.tz

    # =========================================================================
    # Ingestion
    # =========================================================================

    def record_sample(
        self,
        uid: str,
        metric: str,
        value: float,
        unit: Optional[str] = None,
        recorded_at: Optional[datetime] = None,
        source: str = "app",
    ) -> HealthSample:
        name = normalize_metric(metric)
        if value < 0:
            raise ValidationError("value", "must be non-negative")
        converted = convert_value(name, value, unit)

        sample = HealthSample(
            uid=uid,
            metric=name,
            value=converted,
            unit=CANONICAL_UNITS[name],
            recorded_at=to_storage(recorded_at or utc_now()),
            source=source,
        )
        with self._session_factory() as db:
            db.add(sample)
            db.commit()
            db.refresh(sample)

        logger.debug("health_sample_recorded", uid=uid, metric=name, value=converted)
        return sample

    def record_sleep(
        self, uid: str, start: datetime, end: datetime, stage: str = "asleep"
    ) -> SleepSession:
        if stage not in SLEEP_STAGES:
            raise ValidationError("stage", f"unsupported sleep stage '{stage}'")
        if ensure_aware(end) <= ensure_aware(start):
            raise ValidationError("end", "must be after start")

        session = SleepSession(uid=uid, start=to_storage(start), end=to_storage(end), stage=stage)
        with self._session_factory() as db:
            db.add(session)
            db.commit()
            db.refresh(session)
        return session

    def add_water(self, uid: str, ounces: float, now: Optional[datetime] = None) -> float:
        """Log a drink and return today's total intake in ounces."""
        if ounces <= 0:
            raise ValidationError("ounces", "must be positive")
        now = now or utc_now()
        self.record_sample(uid, "water", ounces, unit="fl_oz", recorded_at=now)
        with self._session_factory() as db:
            return self._sum_today(db, uid, "water", now)

    # =========================================================================
    # Reads
    # =========================================================================

    def _sum_today(self, db: Session, uid: str, metric: str, now: datetime) -> float:
        start, _ = local_day_bounds(now, self.tz)
        total = (
            db.query(func.sum(HealthSample.value))
            .filter(
                HealthSample.uid == uid,
                HealthSample.metric == metric,
                HealthSample.recorded_at >= start,
                HealthSample.recorded_at <= to_storage(now),
            )
            .scalar()
        )
        return float(total or 0.0)

    def _latest(
        self, db: Session, uid: str, metric: str, since: Optional[datetime] = None
    ) -> Optional[float]:
        query = db.query(HealthSample.value).filter(
            HealthSample.uid == uid,
            HealthSample.metric == metric,
        )
        if since is not None:
            query = query.filter(HealthSample.recorded_at >= since)
        row = query.order_by(HealthSample.recorded_at.desc(), HealthSample.id.desc()).first()
        return float(row[0]) if row else None

    def _sleep_hours(self, db: Session, uid: str, now: datetime) -> float:
        """Total asleep time in the 24 hours before ``now``."""
        window_end = to_storage(now)
        window_start = window_end - timedelta(hours=24)
        sessions = (
            db.query(SleepSession)
            .filter(
                SleepSession.uid == uid,
                SleepSession.stage.in_(ASLEEP_STAGES),
                SleepSession.end > window_start,
                SleepSession.start < window_end,
            )
            .all()
        )
        seconds = 0.0
        for session in sessions:
            start = max(session.start, window_start)
            end = min(session.end, window_end)
            seconds += max(0.0, (end - start).total_seconds())
        return seconds / 3600

    def get_goals(self, user: Optional[User]) -> tuple[int, float]:
        """Return (steps_goal, water_goal_oz), profile values winning over defaults."""
        steps_goal = self._settings.default_steps_goal
        water_goal = self._settings.default_water_goal_oz
        if user is not None:
            if user.steps_goal:
                steps_goal = user.steps_goal
            if user.water_goal_oz:
                water_goal = clamp_water_goal(user.water_goal_oz)
        return steps_goal, water_goal

    def get_snapshot(self, uid: str, now: Optional[datetime] = None) -> HealthMetrics:
        """Build today's metrics snapshot for a user."""
        now = now or utc_now()
        start, _ = local_day_bounds(now, self.tz)

        with self._session_factory() as db:
            user = db.query(User).filter(User.uid == uid).first()
            steps_goal, water_goal = self.get_goals(user)

            heart_rate = self._latest(db, uid, "heart_rate", since=start) or 0.0
            weight = self._latest(db, uid, "weight")
            height = self._latest(db, uid, "height")
            if weight is None and user is not None:
                weight = user.weight_lbs
            if height is None and user is not None:
                height = user.height_inches

            metrics = HealthMetrics(
                steps=int(self._sum_today(db, uid, "steps", now)),
                heart_rate_bpm=int(heart_rate),
                sleep_hours=self._sleep_hours(db, uid, now),
                active_calories=int(self._sum_today(db, uid, "active_energy", now)),
                dietary_calories=int(self._sum_today(db, uid, "dietary_energy", now)),
                water_oz=self._sum_today(db, uid, "water", now),
                weight_lbs=weight or 0.0,
                height_inches=height or 0.0,
                weekly_steps=self._weekly_steps(db, uid, now),
                steps_goal=steps_goal,
                water_goal_oz=water_goal,
                active_calories_goal=self._settings.active_calories_goal,
                sleep_hours_goal=self._settings.sleep_hours_goal,
            )

        return metrics

    def _weekly_steps(self, db: Session, uid: str, now: datetime) -> dict[date, int]:
        today = local_date(now, self.tz)
        first_day = today - timedelta(days=WEEKLY_DAYS - 1)
        since = to_storage(local_midnight(first_day, self.tz))

        rows = (
            db.query(HealthSample.recorded_at, HealthSample.value)
            .filter(
                HealthSample.uid == uid,
                HealthSample.metric == "steps",
                HealthSample.recorded_at >= since,
                HealthSample.recorded_at <= to_storage(now),
            )
            .all()
        )

        totals: dict[date, float] = defaultdict(float)
        for recorded_at, value in rows:
            totals[local_date(recorded_at, self.tz)] += value

        return {day: int(totals[day]) for day in sorted(totals)}

    def get_weekly_steps(self, uid: str, now: Optional[datetime] = None) -> dict[date, int]:
        """Steps per local day for the last seven days, oldest first.

        Days without any samples are omitted.
        """
        with self._session_factory() as db:
            return self._weekly_steps(db, uid, now or utc_now())

    # =========================================================================
    # Async facade for the progress aggregator
    # =========================================================================

    async def fetch_snapshot(self, uid: str, now: datetime) -> HealthMetrics:
        return await asyncio.get_running_loop().run_in_executor(
            None, self.get_snapshot, uid, now
        )

    async def fetch_weekly_steps(self, uid: str, now: datetime) -> dict[date, int]:
        return await asyncio.get_running_loop().run_in_executor(
            None, self.get_weekly_steps, uid, now
        )
