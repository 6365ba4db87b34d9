from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SkillItem(BaseModel):
    id: str
    name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SkillsResponse(BaseModel):
    skills: list[SkillItem]


class SkillCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    is_active: bool = True


class SkillUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    is_active: bool | None = None


class RatingScaleItem(BaseModel):
    value: int
    label: str
    description: str


class PriorityOption(BaseModel):
    value: str
    label: str


class RatingScaleResponse(BaseModel):
    ratings: list[RatingScaleItem]
    priorities: list[PriorityOption]
