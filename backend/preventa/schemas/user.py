from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8, max_length=72)
    display_name: Optional[str] = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    """Login request body for JSON-based login."""
    username: str
    password: str


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(default=None, max_length=255)
    height_inches: Optional[float] = Field(default=None, gt=0, le=120)
    weight_lbs: Optional[float] = Field(default=None, gt=0, le=1500)
    steps_goal: Optional[int] = Field(default=None, gt=0, le=100000)
    # Clamped to the allowed range rather than rejected
    water_goal_oz: Optional[float] = Field(default=None, gt=0)


class ProfileResponse(BaseModel):
    uid: str
    username: str
    display_name: Optional[str] = None
    height_inches: Optional[float] = None
    weight_lbs: Optional[float] = None
    steps_goal: int
    water_goal_oz: float
    created_at: Optional[datetime] = None
