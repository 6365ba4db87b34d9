"""Domain services."""

from perftrack.domain.services.aggregation import (
    BucketGranularity,
    PerformanceSummary,
    SkillAverage,
    SkillAverages,
    SkillTrend,
    compute_performance_summary,
    compute_skill_averages,
    compute_trends,
)
from perftrack.domain.services.performance import PerformanceService
from perftrack.domain.services.skills import SkillService
from perftrack.domain.services.tasks import TaskService

__all__ = [
    "BucketGranularity",
    "PerformanceService",
    "PerformanceSummary",
    "SkillAverage",
    "SkillAverages",
    "SkillService",
    "SkillTrend",
    "TaskService",
    "compute_performance_summary",
    "compute_skill_averages",
    "compute_trends",
]
