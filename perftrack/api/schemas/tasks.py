from __future__ import annotations

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, Field
from perftrack.infrastructure.db.models import TaskPriority

Rating = Annotated[int, Field(ge=1, le=5, strict=True)]


class TaskSubmission(BaseModel):
    """Task fields plus one rating per active skill, keyed by skill id."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    task_date: date
    external_link: str | None = Field(None, max_length=2048)
    priority: TaskPriority = TaskPriority.MEDIUM
    delivered_on_time: bool = False
    manager_found_issues: bool = False
    manager_notes: str | None = None
    manager_helped_analysis: bool = False
    skill_ratings: dict[str, Rating] = Field(..., description="skill_id -> rating (1-5)")


class SkillRatingItem(BaseModel):
    id: str
    skill_id: str
    skill_name: str
    rating: int


class TaskResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: str
    task_date: date
    external_link: str | None = None
    priority: TaskPriority
    delivered_on_time: bool
    manager_found_issues: bool
    manager_notes: str | None = None
    manager_helped_analysis: bool
    created_at: datetime
    updated_at: datetime
    average_rating: float
    skill_ratings: list[SkillRatingItem]


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    limit: int
    offset: int
