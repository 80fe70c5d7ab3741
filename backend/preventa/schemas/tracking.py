"""Request/response schemas for the tracked collections (meals, meds, plans, ...)."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class MealCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    calories: int = Field(ge=0, le=10000)
    protein: Optional[float] = Field(default=None, ge=0)
    carbs: Optional[float] = Field(default=None, ge=0)
    fat: Optional[float] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    meal_type: MealType = MealType.SNACK
    timestamp: Optional[datetime] = None


class MealResponse(BaseModel):
    id: str
    name: str
    calories: int
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    image_url: Optional[str] = None
    meal_type: MealType
    timestamp: datetime

    model_config = {"from_attributes": True}


class MealsTodayResponse(BaseModel):
    meals: list[MealResponse]
    todays_calories: int


class MedicationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    is_critical: bool = False


class MedicationResponse(BaseModel):
    id: int
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    is_critical: bool = False
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MedicationLogCreate(BaseModel):
    medication_id: int
    timestamp: Optional[datetime] = None


class MedicationLogResponse(BaseModel):
    id: int
    medication_id: int
    timestamp: datetime

    model_config = {"from_attributes": True}


class CheckInCreate(BaseModel):
    mood: Optional[int] = Field(default=None, ge=1, le=5)
    energy: Optional[int] = Field(default=None, ge=1, le=5)
    note: Optional[str] = Field(default=None, max_length=5000)
    timestamp: Optional[datetime] = None


class CheckInResponse(BaseModel):
    id: int
    mood: Optional[int] = None
    energy: Optional[int] = None
    note: Optional[str] = None
    timestamp: datetime

    model_config = {"from_attributes": True}


class VisualPhotoCreate(BaseModel):
    category: str = Field(min_length=1, max_length=50)
    image_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class VisualPhotoResponse(BaseModel):
    id: int
    category: str
    image_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class QuizCompletionCreate(BaseModel):
    quiz_id: str = Field(min_length=1, max_length=100)
    score: Optional[float] = Field(default=None, ge=0)
    completed_at: Optional[datetime] = None


class QuizCompletionResponse(BaseModel):
    id: int
    quiz_id: str
    score: Optional[float] = None
    completed_at: datetime

    model_config = {"from_attributes": True}


class LearningSessionCreate(BaseModel):
    topic: Optional[str] = Field(default=None, max_length=255)
    minutes: float = Field(gt=0, le=24 * 60)
    started_at: Optional[datetime] = None


class LearningSessionResponse(BaseModel):
    id: int
    topic: Optional[str] = None
    minutes: float
    started_at: datetime

    model_config = {"from_attributes": True}


class ActionPlanCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: datetime


class ActionPlanRecord(BaseModel):
    """An action plan as read back from the store.

    Also the parse target for the progress aggregator; rows that do not
    validate against it are excluded from completion counts.
    """

    id: str
    title: str
    description: Optional[str] = None
    due_date: datetime
    is_completed: bool = False
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
