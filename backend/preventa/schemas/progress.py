from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ProgressCategory(str, Enum):
    HEALTH = "health"
    LEARNING = "learning"
    VISUAL = "visual"
    MEDICATION = "medication"
    ACTION_PLANS = "action_plans"
    CHECKINS = "checkins"


class ProgressReport(BaseModel):
    """Daily progress score with its per-category breakdown."""

    uid: str
    score: float = Field(ge=0.0, le=1.0)
    categories: dict[ProgressCategory, float]
    failed_categories: list[ProgressCategory] = Field(default_factory=list)
    computed_at: datetime

    @property
    def percent(self) -> int:
        return int(round(self.score * 100))
