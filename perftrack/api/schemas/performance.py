from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class SkillAverageItem(BaseModel):
    skill_id: str
    skill_name: str
    average_rating: float
    rating_count: int
    min_rating: int
    max_rating: int


class SkillAveragesResponse(BaseModel):
    all_skills: list[SkillAverageItem]
    strengths: list[SkillAverageItem]
    growth_opportunities: list[SkillAverageItem]


class SkillTrendItem(BaseModel):
    skill_id: str
    skill_name: str
    period: date
    average_rating: float
    rating_count: int


class SkillTrendsResponse(BaseModel):
    granularity: str
    start_date: date
    end_date: date
    trends: list[SkillTrendItem]


class PerformanceSummaryResponse(BaseModel):
    total_tasks: int
    overall_average: float
    skill_averages: list[SkillAverageItem]
    strengths: list[SkillAverageItem]
    growth_opportunities: list[SkillAverageItem]
    on_time_delivery_rate: float
    manager_issues_rate: float
    manager_helped_rate: float
