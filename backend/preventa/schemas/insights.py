from enum import Enum

from pydantic import BaseModel


class InsightKind(str, Enum):
    TREND = "trend"
    RECOMMENDATION = "recommendation"
    ACHIEVEMENT = "achievement"
    WARNING = "warning"


class InsightPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


PRIORITY_RANK = {
    InsightPriority.HIGH: 3,
    InsightPriority.MEDIUM: 2,
    InsightPriority.LOW: 1,
}


class Insight(BaseModel):
    """A short, human-readable observation about the user's health data."""

    kind: InsightKind
    title: str
    message: str
    priority: InsightPriority


class InsightsResponse(BaseModel):
    insights: list[Insight]


class NarrativeInsightResponse(BaseModel):
    narrative: str
    model: str
