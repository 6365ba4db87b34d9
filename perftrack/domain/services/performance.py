"""Performance read paths: load a user's observations and hand them to the aggregator.

Storage failures on these read paths are logged and answered with an empty result.
Writes live in the task store and propagate their failures.
"""

from __future__ import annotations

import calendar
from datetime import UTC, date, datetime, timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from perftrack.core.config import get_settings
from perftrack.domain.services.aggregation import (
    BucketGranularity,
    PerformanceSummary,
    SkillAverages,
    SkillTrend,
    TaskFlags,
    compute_performance_summary,
    compute_skill_averages,
    compute_trends,
)
from perftrack.domain.services.observations import Observation, observation_from_record
from perftrack.infrastructure.db.models import Skill, SkillRating, Task
from perftrack.infrastructure.db.session import STORAGE_ERRORS

logger = structlog.get_logger()


def today_utc() -> date:
    return datetime.now(UTC).date()


def subtract_months(value: date, months: int) -> date:
    """Same day ``months`` calendar months earlier, clamped to the month's length."""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class PerformanceService:
    """Aggregation entry points scoped to one user's tasks."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def overall_skill_averages(self, *, user_id: str) -> SkillAverages:
        try:
            observations = await self._load_observations(user_id)
        except STORAGE_ERRORS as exc:
            logger.error("skill_averages_query_failed", user_id=user_id, error=str(exc))
            return SkillAverages()
        return compute_skill_averages(observations)

    async def weekly_trends(
        self, *, user_id: str, weeks: int | None = None, as_of: date | None = None
    ) -> list[SkillTrend]:
        weeks = weeks or get_settings().weekly_trend_weeks
        end_date = as_of or today_utc()
        start_date = end_date - timedelta(days=weeks * 7)
        return await self._trends(user_id, BucketGranularity.WEEK, start_date, end_date)

    async def monthly_trends(
        self, *, user_id: str, months: int | None = None, as_of: date | None = None
    ) -> list[SkillTrend]:
        months = months or get_settings().monthly_trend_months
        end_date = as_of or today_utc()
        start_date = subtract_months(end_date, months)
        return await self._trends(user_id, BucketGranularity.MONTH, start_date, end_date)

    async def performance_summary(
        self,
        *,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PerformanceSummary:
        try:
            tasks = await self._load_task_flags(user_id, start_date, end_date)
            observations = await self._load_observations(user_id, start_date, end_date)
        except STORAGE_ERRORS as exc:
            logger.error("performance_summary_query_failed", user_id=user_id, error=str(exc))
            return PerformanceSummary()

        summary = compute_performance_summary(tasks, observations)
        logger.info(
            "performance_summary_computed",
            user_id=user_id,
            total_tasks=summary.total_tasks,
            skills=len(summary.skill_averages),
        )
        return summary

    async def _trends(
        self,
        user_id: str,
        granularity: BucketGranularity,
        start_date: date,
        end_date: date,
    ) -> list[SkillTrend]:
        try:
            observations = await self._load_observations(user_id, start_date, end_date)
        except STORAGE_ERRORS as exc:
            logger.error(
                "skill_trends_query_failed",
                user_id=user_id,
                granularity=granularity.value,
                error=str(exc),
            )
            return []
        return compute_trends(observations, granularity)

    async def _load_observations(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Observation]:
        # Historical ratings count regardless of the skill's current active flag
        stmt = (
            select(SkillRating.rating, Skill.id, Skill.name, Task.task_date, Task.user_id)
            .join(Task, SkillRating.task_id == Task.id)
            .join(Skill, SkillRating.skill_id == Skill.id)
            .where(Task.user_id == user_id)
        )
        if start_date is not None:
            stmt = stmt.where(Task.task_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(Task.task_date <= end_date)

        rows = (await self.session.execute(stmt)).all()
        return [
            observation_from_record(
                {
                    "rating": rating,
                    "skill": {"id": skill_id, "name": skill_name},
                    "task": {"task_date": task_date, "user_id": owner_id},
                },
                owner_id=user_id,
            )
            for rating, skill_id, skill_name, task_date, owner_id in rows
        ]

    async def _load_task_flags(
        self,
        user_id: str,
        start_date: date | None,
        end_date: date | None,
    ) -> list[TaskFlags]:
        stmt = select(
            Task.delivered_on_time,
            Task.manager_found_issues,
            Task.manager_helped_analysis,
        ).where(Task.user_id == user_id)
        if start_date is not None:
            stmt = stmt.where(Task.task_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(Task.task_date <= end_date)

        rows = (await self.session.execute(stmt)).all()
        return [
            TaskFlags(
                delivered_on_time=bool(on_time),
                manager_found_issues=bool(issues),
                manager_helped_analysis=bool(helped),
            )
            for on_time, issues, helped in rows
        ]
