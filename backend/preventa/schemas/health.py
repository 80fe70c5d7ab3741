"""Health data schemas: the daily metrics snapshot and sample uploads."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from preventa.services.dates import ensure_aware

# Default daily goals; a user profile may override steps and water
DEFAULT_STEPS_GOAL = 10000
DEFAULT_WATER_GOAL_OZ = 64.0
ACTIVE_CALORIES_GOAL = 500
SLEEP_HOURS_GOAL = 8.0

# Allowed range for a user-chosen water goal (oz)
MIN_WATER_GOAL_OZ = 8.0
MAX_WATER_GOAL_OZ = 200.0

KG_PER_LB = 0.453592
METERS_PER_INCH = 0.0254
OZ_PER_GLASS = 8


class HealthMetrics(BaseModel):
    """Snapshot of one user's health readings for a single day."""

    steps: int = Field(default=0, ge=0)
    heart_rate_bpm: int = Field(default=0, ge=0)
    sleep_hours: float = Field(default=0.0, ge=0)
    active_calories: int = Field(default=0, ge=0)
    dietary_calories: int = Field(default=0, ge=0)
    water_oz: float = Field(default=0.0, ge=0)
    weight_lbs: float = Field(default=0.0, ge=0)
    height_inches: float = Field(default=0.0, ge=0)
    weekly_steps: dict[date, int] = Field(default_factory=dict)

    steps_goal: int = Field(default=DEFAULT_STEPS_GOAL, gt=0)
    water_goal_oz: float = Field(default=DEFAULT_WATER_GOAL_OZ, gt=0)
    active_calories_goal: int = Field(default=ACTIVE_CALORIES_GOAL, gt=0)
    sleep_hours_goal: float = Field(default=SLEEP_HOURS_GOAL, gt=0)

    @computed_field
    @property
    def bmi(self) -> Optional[float]:
        if self.weight_lbs <= 0 or self.height_inches <= 0:
            return None
        height_m = self.height_inches * METERS_PER_INCH
        weight_kg = self.weight_lbs * KG_PER_LB
        return weight_kg / (height_m * height_m)

    @computed_field
    @property
    def steps_progress(self) -> float:
        return min(1.0, self.steps / self.steps_goal)

    @computed_field
    @property
    def water_progress(self) -> float:
        return min(1.0, self.water_oz / self.water_goal_oz)

    @computed_field
    @property
    def exercise_progress(self) -> float:
        # No exercise-minutes source exists; active energy stands in for it.
        return min(1.0, self.active_calories / self.active_calories_goal)

    def summary(self) -> str:
        """One-line human summary listing only the metrics that were recorded."""
        parts = []
        if self.steps > 0:
            parts.append(f"Steps: {self.steps} today")
        if self.heart_rate_bpm > 0:
            parts.append(f"Heart Rate: {self.heart_rate_bpm} bpm")
        if self.sleep_hours > 0:
            parts.append(f"Sleep: {self.sleep_hours:.1f} hours")
        if self.active_calories > 0:
            parts.append(f"Active Calories: {self.active_calories} kcal")
        if self.dietary_calories > 0:
            parts.append(f"Food Calories: {self.dietary_calories} kcal")
        if self.water_oz > 0:
            parts.append(f"Water: {self.water_oz:.1f} oz")
        return ", ".join(parts)


class HealthSampleCreate(BaseModel):
    metric: str = Field(min_length=1, max_length=50)
    value: float = Field(ge=0)
    unit: Optional[str] = None
    recorded_at: Optional[datetime] = None
    source: str = "app"


class HealthSampleResponse(BaseModel):
    id: int
    metric: str
    value: float
    unit: Optional[str] = None
    recorded_at: datetime
    source: Optional[str] = None

    model_config = {"from_attributes": True}


SleepStage = Literal["asleep", "in_bed", "core", "deep", "rem", "awake"]


class SleepSessionCreate(BaseModel):
    start: datetime
    end: datetime
    stage: SleepStage = "asleep"

    @model_validator(mode="after")
    def check_order(self) -> "SleepSessionCreate":
        if ensure_aware(self.end) <= ensure_aware(self.start):
            raise ValueError("end must be after start")
        return self


class WaterIntakeCreate(BaseModel):
    ounces: float = Field(gt=0, le=128)


class WaterIntakeResponse(BaseModel):
    todays_intake_oz: float
    goal_oz: float
    progress: float


class DailySteps(BaseModel):
    date: date
    steps: int


class WeeklyStepsResponse(BaseModel):
    days: list[DailySteps]


class HealthSummaryResponse(BaseModel):
    summary: str
    metrics: HealthMetrics
