"""Skill aggregation: per-skill statistics, strength rankings and trend buckets.

Everything in this module is a pure function of the observations handed to it.
Callers are expected to pre-filter observations to one owner and date range.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import TypeVar

from perftrack.domain.services.observations import Observation, validate_observation

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

RANKING_SIZE = 5


class BucketGranularity(str, Enum):
    WEEK = "week"
    MONTH = "month"


@dataclass(slots=True)
class SkillAverage:
    skill_id: str
    skill_name: str
    average_rating: float
    rating_count: int
    min_rating: int
    max_rating: int


@dataclass(slots=True)
class SkillTrend:
    skill_id: str
    skill_name: str
    period: date
    average_rating: float
    rating_count: int


@dataclass(slots=True)
class SkillAverages:
    """Ranked skill statistics; strengths and growth opportunities share one order."""

    all_skills: list[SkillAverage] = field(default_factory=list)
    strengths: list[SkillAverage] = field(default_factory=list)
    growth_opportunities: list[SkillAverage] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TaskFlags:
    """The per-task booleans that feed the summary rates."""

    delivered_on_time: bool
    manager_found_issues: bool
    manager_helped_analysis: bool


@dataclass(slots=True)
class PerformanceSummary:
    total_tasks: int = 0
    overall_average: float = 0.0
    skill_averages: list[SkillAverage] = field(default_factory=list)
    strengths: list[SkillAverage] = field(default_factory=list)
    growth_opportunities: list[SkillAverage] = field(default_factory=list)
    on_time_delivery_rate: float = 0.0
    manager_issues_rate: float = 0.0
    manager_helped_rate: float = 0.0


def group_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """Group items by key, preserving first-seen key order and item order."""
    groups: dict[K, list[T]] = defaultdict(list)
    for item in items:
        groups[key(item)].append(item)
    return dict(groups)


def week_start(value: date) -> date:
    """Monday on or before ``value``."""
    return value - timedelta(days=value.weekday())


def month_start(value: date) -> date:
    return value.replace(day=1)


def bucket_start(value: date, granularity: BucketGranularity | str) -> date:
    granularity = BucketGranularity(granularity)
    if granularity is BucketGranularity.WEEK:
        return week_start(value)
    return month_start(value)


def _mean(ratings: Sequence[float]) -> float:
    return sum(ratings) / len(ratings)


def _checked(observations: Iterable[Observation]) -> list[Observation]:
    # Materialize once and reject the whole batch on the first bad row
    checked = list(observations)
    for observation in checked:
        validate_observation(observation)
    return checked


def _ranking_key(average: SkillAverage) -> tuple[float, int, str]:
    return (-average.average_rating, -average.rating_count, average.skill_name)


def compute_skill_averages(observations: Iterable[Observation]) -> SkillAverages:
    """Per-skill mean/count/min/max, sorted best first, with top and bottom five."""
    groups = group_by(_checked(observations), lambda obs: obs.skill_id)

    all_skills: list[SkillAverage] = []
    for skill_id, group in groups.items():
        ratings = [obs.rating for obs in group]
        all_skills.append(
            SkillAverage(
                skill_id=skill_id,
                skill_name=group[0].skill_name,
                average_rating=_mean(ratings),
                rating_count=len(ratings),
                min_rating=min(ratings),
                max_rating=max(ratings),
            )
        )

    all_skills.sort(key=_ranking_key)
    # Lists overlap when five or fewer skills have data
    strengths = all_skills[:RANKING_SIZE]
    growth_opportunities = list(reversed(all_skills[-RANKING_SIZE:]))
    return SkillAverages(
        all_skills=all_skills,
        strengths=strengths,
        growth_opportunities=growth_opportunities,
    )


def compute_trends(
    observations: Iterable[Observation],
    granularity: BucketGranularity | str,
) -> list[SkillTrend]:
    """Mean and count per (skill, bucket start), ordered by bucket."""
    granularity = BucketGranularity(granularity)
    groups = group_by(
        _checked(observations),
        lambda obs: (obs.skill_id, bucket_start(obs.task_date, granularity)),
    )

    trends = [
        SkillTrend(
            skill_id=skill_id,
            skill_name=group[0].skill_name,
            period=period,
            average_rating=_mean([obs.rating for obs in group]),
            rating_count=len(group),
        )
        for (skill_id, period), group in groups.items()
    ]
    trends.sort(key=lambda trend: (trend.period, trend.skill_name, trend.skill_id))
    return trends


def _rate(count: int, total: int) -> float:
    return (count / total) * 100


def compute_performance_summary(
    tasks: Sequence[TaskFlags],
    observations: Iterable[Observation],
) -> PerformanceSummary:
    """Task counts, flag rates and skill rankings over one filtered task set."""
    total_tasks = len(tasks)
    if total_tasks == 0:
        return PerformanceSummary()

    averages = compute_skill_averages(observations)
    overall_average = (
        _mean([skill.average_rating for skill in averages.all_skills])
        if averages.all_skills
        else 0.0
    )

    return PerformanceSummary(
        total_tasks=total_tasks,
        overall_average=overall_average,
        skill_averages=averages.all_skills,
        strengths=averages.strengths,
        growth_opportunities=averages.growth_opportunities,
        on_time_delivery_rate=_rate(sum(task.delivered_on_time for task in tasks), total_tasks),
        manager_issues_rate=_rate(sum(task.manager_found_issues for task in tasks), total_tasks),
        manager_helped_rate=_rate(
            sum(task.manager_helped_analysis for task in tasks), total_tasks
        ),
    )
