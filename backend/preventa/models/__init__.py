import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def new_uid() -> str:
    return str(uuid.uuid4())


# All timestamps are stored as naive UTC.


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), nullable=False, unique=True, index=True, default=new_uid)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(255))

    # Profile values that override health-provider readings and default goals
    height_inches = Column(Float)
    weight_lbs = Column(Float)
    steps_goal = Column(Integer)
    water_goal_oz = Column(Float)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    medications = relationship("Medication", back_populates="user", cascade="all, delete-orphan")


# =============================================================================
# Health provider records
# =============================================================================


class HealthSample(Base):
    """A single quantity reading (steps, water, heart rate, ...)."""

    __tablename__ = "health_samples"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    metric = Column(String(50), nullable=False)  # steps, heart_rate, active_energy, ...
    value = Column(Float, nullable=False)
    unit = Column(String(20))  # count, bpm, kcal, fl_oz, lb, in
    recorded_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    source = Column(String(50), default="app")
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_health_samples_uid_metric_recorded", "uid", "metric", "recorded_at"),
    )


class SleepSession(Base):
    __tablename__ = "sleep_sessions"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    start = Column(DateTime, nullable=False)
    end = Column(DateTime, nullable=False, index=True)
    stage = Column(String(20), nullable=False, default="asleep")  # asleep, in_bed, core, deep, rem, awake
    created_at = Column(DateTime, default=datetime.utcnow)


# =============================================================================
# Document store collections
# =============================================================================


class QuizCompletion(Base):
    __tablename__ = "quiz_completions"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    quiz_id = Column(String(100), nullable=False)
    score = Column(Float)
    completed_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class LearningSession(Base):
    """Time spent in learning content, with or without finishing a quiz."""

    __tablename__ = "learning_sessions"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    topic = Column(String(255))
    minutes = Column(Float, nullable=False, default=0)
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class VisualPhoto(Base):
    __tablename__ = "visual_photos"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    category = Column(String(50), nullable=False)  # skin, eyes, tongue, ...
    image_url = Column(String(1024))
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class Medication(Base):
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    dosage = Column(String(100))
    frequency = Column(String(100))
    is_critical = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="medications")
    logs = relationship("MedicationLog", back_populates="medication", cascade="all, delete-orphan")


class MedicationLog(Base):
    __tablename__ = "medication_logs"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    medication = relationship("Medication", back_populates="logs")


class ActionPlan(Base):
    __tablename__ = "action_plans"

    id = Column(String(36), primary_key=True, default=new_uid)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    due_date = Column(DateTime, nullable=False, index=True)
    is_completed = Column(Boolean, default=False)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)


class CheckIn(Base):
    __tablename__ = "check_ins"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    mood = Column(Integer)  # 1-5
    energy = Column(Integer)  # 1-5
    note = Column(Text)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class Meal(Base):
    __tablename__ = "meals"

    id = Column(String(36), primary_key=True, default=new_uid)
    uid = Column(String(36), ForeignKey("users.uid"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    calories = Column(Integer, nullable=False)
    protein = Column(Float)
    carbs = Column(Float)
    fat = Column(Float)
    image_url = Column(String(1024))
    meal_type = Column(String(20), default="snack")  # breakfast, lunch, dinner, snack
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
