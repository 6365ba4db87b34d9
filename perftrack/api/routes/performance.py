from __future__ import annotations

from dataclasses import asdict
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from perftrack.api.deps import get_current_user, get_db_session
from perftrack.api.schemas.performance import (
    PerformanceSummaryResponse,
    SkillAverageItem,
    SkillAveragesResponse,
    SkillTrendItem,
    SkillTrendsResponse,
)
from perftrack.core.config import get_settings
from perftrack.domain import User
from perftrack.domain.services.aggregation import SkillAverage, SkillTrend
from perftrack.domain.services.performance import (
    PerformanceService,
    subtract_months,
    today_utc,
)

router = APIRouter(prefix="/performance", tags=["Performance"])


def _averages(items: list[SkillAverage]) -> list[SkillAverageItem]:
    return [SkillAverageItem(**asdict(item)) for item in items]


def _trends(items: list[SkillTrend]) -> list[SkillTrendItem]:
    return [SkillTrendItem(**asdict(item)) for item in items]


@router.get("/skills", response_model=SkillAveragesResponse)
async def overall_skill_averages(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> SkillAveragesResponse:
    """All-time per-skill averages with the top and bottom five."""
    result = await PerformanceService(session).overall_skill_averages(user_id=user.user_id)
    return SkillAveragesResponse(
        all_skills=_averages(result.all_skills),
        strengths=_averages(result.strengths),
        growth_opportunities=_averages(result.growth_opportunities),
    )


@router.get("/trends/weekly", response_model=SkillTrendsResponse)
async def weekly_trends(
    weeks: int | None = Query(None, ge=1, le=104, description="Trailing weeks"),
    as_of: date | None = Query(None, description="Window end date, defaults to today"),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> SkillTrendsResponse:
    weeks = weeks or get_settings().weekly_trend_weeks
    end_date = as_of or today_utc()
    trends = await PerformanceService(session).weekly_trends(
        user_id=user.user_id, weeks=weeks, as_of=end_date
    )
    return SkillTrendsResponse(
        granularity="week",
        start_date=end_date - timedelta(days=weeks * 7),
        end_date=end_date,
        trends=_trends(trends),
    )


@router.get("/trends/monthly", response_model=SkillTrendsResponse)
async def monthly_trends(
    months: int | None = Query(None, ge=1, le=36, description="Trailing months"),
    as_of: date | None = Query(None, description="Window end date, defaults to today"),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> SkillTrendsResponse:
    months = months or get_settings().monthly_trend_months
    end_date = as_of or today_utc()
    trends = await PerformanceService(session).monthly_trends(
        user_id=user.user_id, months=months, as_of=end_date
    )
    return SkillTrendsResponse(
        granularity="month",
        start_date=subtract_months(end_date, months),
        end_date=end_date,
        trends=_trends(trends),
    )


@router.get("/summary", response_model=PerformanceSummaryResponse)
async def performance_summary(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> PerformanceSummaryResponse:
    """Task count, delivery rates and skill rankings over an optional date range."""
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start_date must not be after end_date",
        )

    summary = await PerformanceService(session).performance_summary(
        user_id=user.user_id, start_date=start_date, end_date=end_date
    )
    return PerformanceSummaryResponse(
        total_tasks=summary.total_tasks,
        overall_average=summary.overall_average,
        skill_averages=_averages(summary.skill_averages),
        strengths=_averages(summary.strengths),
        growth_opportunities=_averages(summary.growth_opportunities),
        on_time_delivery_rate=summary.on_time_delivery_rate,
        manager_issues_rate=summary.manager_issues_rate,
        manager_helped_rate=summary.manager_helped_rate,
    )
