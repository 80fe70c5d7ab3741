"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("height_inches", sa.Float(), nullable=True),
        sa.Column("weight_lbs", sa.Float(), nullable=True),
        sa.Column("steps_goal", sa.Integer(), nullable=True),
        sa.Column("water_goal_oz", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_uid"), "users", ["uid"], unique=True)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    # Health provider records
    op.create_table(
        "health_samples",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("metric", sa.String(length=50), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=True),
        sa.Column("recorded_at", sa.DateTime(), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_health_samples_id"), "health_samples", ["id"], unique=False)
    op.create_index(op.f("ix_health_samples_uid"), "health_samples", ["uid"], unique=False)
    op.create_index(
        "ix_health_samples_uid_metric_recorded",
        "health_samples",
        ["uid", "metric", "recorded_at"],
        unique=False,
    )

    op.create_table(
        "sleep_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("start", sa.DateTime(), nullable=False),
        sa.Column("end", sa.DateTime(), nullable=False),
        sa.Column("stage", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sleep_sessions_id"), "sleep_sessions", ["id"], unique=False)
    op.create_index(op.f("ix_sleep_sessions_uid"), "sleep_sessions", ["uid"], unique=False)
    op.create_index(op.f("ix_sleep_sessions_end"), "sleep_sessions", ["end"], unique=False)

    # Document store collections
    op.create_table(
        "quiz_completions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("quiz_id", sa.String(length=100), nullable=False),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_quiz_completions_id"), "quiz_completions", ["id"], unique=False)
    op.create_index(op.f("ix_quiz_completions_uid"), "quiz_completions", ["uid"], unique=False)
    op.create_index(
        op.f("ix_quiz_completions_completed_at"), "quiz_completions", ["completed_at"], unique=False
    )

    op.create_table(
        "learning_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("topic", sa.String(length=255), nullable=True),
        sa.Column("minutes", sa.Float(), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_learning_sessions_id"), "learning_sessions", ["id"], unique=False)
    op.create_index(op.f("ix_learning_sessions_uid"), "learning_sessions", ["uid"], unique=False)
    op.create_index(
        op.f("ix_learning_sessions_started_at"), "learning_sessions", ["started_at"], unique=False
    )

    op.create_table(
        "visual_photos",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_visual_photos_id"), "visual_photos", ["id"], unique=False)
    op.create_index(op.f("ix_visual_photos_uid"), "visual_photos", ["uid"], unique=False)
    op.create_index(op.f("ix_visual_photos_created_at"), "visual_photos", ["created_at"], unique=False)

    op.create_table(
        "medications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("dosage", sa.String(length=100), nullable=True),
        sa.Column("frequency", sa.String(length=100), nullable=True),
        sa.Column("is_critical", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_medications_id"), "medications", ["id"], unique=False)
    op.create_index(op.f("ix_medications_uid"), "medications", ["uid"], unique=False)

    op.create_table(
        "medication_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("medication_id", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.ForeignKeyConstraint(["medication_id"], ["medications.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_medication_logs_id"), "medication_logs", ["id"], unique=False)
    op.create_index(op.f("ix_medication_logs_uid"), "medication_logs", ["uid"], unique=False)
    op.create_index(op.f("ix_medication_logs_timestamp"), "medication_logs", ["timestamp"], unique=False)

    op.create_table(
        "action_plans",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_action_plans_uid"), "action_plans", ["uid"], unique=False)
    op.create_index(op.f("ix_action_plans_due_date"), "action_plans", ["due_date"], unique=False)

    op.create_table(
        "check_ins",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("mood", sa.Integer(), nullable=True),
        sa.Column("energy", sa.Integer(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_check_ins_id"), "check_ins", ["id"], unique=False)
    op.create_index(op.f("ix_check_ins_uid"), "check_ins", ["uid"], unique=False)
    op.create_index(op.f("ix_check_ins_timestamp"), "check_ins", ["timestamp"], unique=False)

    op.create_table(
        "meals",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("calories", sa.Integer(), nullable=False),
        sa.Column("protein", sa.Float(), nullable=True),
        sa.Column("carbs", sa.Float(), nullable=True),
        sa.Column("fat", sa.Float(), nullable=True),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("meal_type", sa.String(length=20), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_meals_uid"), "meals", ["uid"], unique=False)
    op.create_index(op.f("ix_meals_timestamp"), "meals", ["timestamp"], unique=False)


def downgrade() -> None:
    op.drop_table("meals")
    op.drop_table("check_ins")
    op.drop_table("action_plans")
    op.drop_table("medication_logs")
    op.drop_table("medications")
    op.drop_table("visual_photos")
    op.drop_table("learning_sessions")
    op.drop_table("quiz_completions")
    op.drop_table("sleep_sessions")
    op.drop_table("health_samples")
    op.drop_table("users")
