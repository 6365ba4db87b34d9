"""Initial schema for users, skills, tasks and skill ratings

Revision ID: 202401010001
Revises:
Create Date: 2024-01-01 00:01:00
"""

from __future__ import annotations

import uuid

import sqlalchemy as sa
from alembic import op

revision = "202401010001"
down_revision = None
branch_labels = None
depends_on = None

SEED_SKILLS = (
    "Analysis",
    "Planning",
    "Development",
    "QA",
    "English",
    "Task Comments",
    "Edge Cases Covered",
    "PR Review",
    "Code Quality",
    "Problem Solving",
    "Testing",
    "Debugging",
    "Time Management",
    "Initiative/Proactivity",
    "Mentoring Others",
)

user_role_enum = sa.Enum("employee", "admin", name="user_role")
user_status_enum = sa.Enum("active", "inactive", "suspended", name="user_status")
task_priority_enum = sa.Enum("high", "medium", "low", name="task_priority")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=128), nullable=True),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("status", user_status_enum, nullable=False),
        *_timestamps(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    skills = op.create_table(
        "skills",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("task_date", sa.Date(), nullable=False),
        sa.Column("external_link", sa.String(length=2048), nullable=True),
        sa.Column("priority", task_priority_enum, nullable=False),
        sa.Column("delivered_on_time", sa.Boolean(), nullable=False),
        sa.Column("manager_found_issues", sa.Boolean(), nullable=False),
        sa.Column("manager_notes", sa.Text(), nullable=True),
        sa.Column("manager_helped_analysis", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_tasks_user_id", "tasks", ["user_id"])
    op.create_index("ix_tasks_task_date", "tasks", ["task_date"])

    op.create_table(
        "skill_ratings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "task_id",
            sa.String(length=36),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "skill_id",
            sa.String(length=36),
            sa.ForeignKey("skills.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("task_id", "skill_id", name="uq_skill_rating_task_skill"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_skill_rating_range"),
    )
    op.create_index("ix_skill_ratings_task_id", "skill_ratings", ["task_id"])
    op.create_index("ix_skill_ratings_skill_id", "skill_ratings", ["skill_id"])

    op.bulk_insert(
        skills,
        [{"id": str(uuid.uuid4()), "name": name, "is_active": True} for name in SEED_SKILLS],
    )


def downgrade() -> None:
    op.drop_index("ix_skill_ratings_skill_id", table_name="skill_ratings")
    op.drop_index("ix_skill_ratings_task_id", table_name="skill_ratings")
    op.drop_table("skill_ratings")
    op.drop_index("ix_tasks_task_date", table_name="tasks")
    op.drop_index("ix_tasks_user_id", table_name="tasks")
    op.drop_table("tasks")
    op.drop_table("skills")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    task_priority_enum.drop(bind, checkfirst=True)
    user_status_enum.drop(bind, checkfirst=True)
    user_role_enum.drop(bind, checkfirst=True)
