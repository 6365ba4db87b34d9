from __future__ import annotations

import random
from datetime import date, timedelta

import pytest
from perftrack.domain.services.aggregation import (
    BucketGranularity,
    TaskFlags,
    bucket_start,
    compute_performance_summary,
    compute_skill_averages,
    compute_trends,
    group_by,
    month_start,
    week_start,
)
from perftrack.domain.services.observations import InvalidObservationError, Observation


def obs(skill: str, rating: int, day: date | str = "2024-01-08") -> Observation:
    task_date = date.fromisoformat(day) if isinstance(day, str) else day
    return Observation(
        skill_id=f"id-{skill}",
        skill_name=skill,
        rating=rating,
        task_date=task_date,
        owner_id="user-1",
    )


def flags(on_time: bool = False, issues: bool = False, helped: bool = False) -> TaskFlags:
    return TaskFlags(
        delivered_on_time=on_time,
        manager_found_issues=issues,
        manager_helped_analysis=helped,
    )


class TestBucketing:
    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            ("2024-01-01", "2024-01-01"),  # Monday
            ("2024-01-02", "2024-01-01"),  # Tuesday
            ("2024-01-07", "2024-01-01"),  # Sunday belongs to the preceding Monday
            ("2024-01-08", "2024-01-08"),
            ("2024-03-03", "2024-02-26"),  # crosses a month boundary
            ("2025-01-01", "2024-12-30"),  # crosses a year boundary
        ],
    )
    def test_week_start_is_monday_on_or_before(self, day: str, expected: str) -> None:
        assert week_start(date.fromisoformat(day)) == date.fromisoformat(expected)

    def test_week_bucketing_is_idempotent(self) -> None:
        day = date(2023, 12, 1)
        for offset in range(60):
            start = week_start(day + timedelta(days=offset))
            assert start.weekday() == 0
            assert week_start(start) == start

    def test_month_start(self) -> None:
        assert month_start(date(2024, 2, 29)) == date(2024, 2, 1)
        assert bucket_start(date(2024, 1, 31), "month") == date(2024, 1, 1)
        assert bucket_start(date(2024, 2, 1), BucketGranularity.MONTH) == date(2024, 2, 1)

    def test_unknown_granularity_rejected(self) -> None:
        with pytest.raises(ValueError):
            bucket_start(date(2024, 1, 1), "day")


def test_group_by_preserves_order() -> None:
    groups = group_by(["apple", "avocado", "banana", "apricot"], lambda word: word[0])
    assert list(groups) == ["a", "b"]
    assert groups["a"] == ["apple", "avocado", "apricot"]


class TestSkillAverages:
    def test_statistics_per_skill(self) -> None:
        result = compute_skill_averages(
            [obs("Testing", 4), obs("Testing", 5), obs("Testing", 3), obs("QA", 2)]
        )

        testing = next(item for item in result.all_skills if item.skill_name == "Testing")
        assert testing.skill_id == "id-Testing"
        assert testing.average_rating == 4.0
        assert testing.rating_count == 3
        assert testing.min_rating == 3
        assert testing.max_rating == 5

    def test_sorted_by_mean_then_count_then_name(self) -> None:
        observations = [
            obs("Planning", 4),
            obs("Analysis", 4),
            obs("Debugging", 4),
            obs("Debugging", 4),
            obs("QA", 5),
            obs("English", 2),
        ]

        names = [item.skill_name for item in compute_skill_averages(observations).all_skills]

        assert names == ["QA", "Debugging", "Analysis", "Planning", "English"]

    def test_strengths_and_growth_come_from_one_order(self) -> None:
        observations = [obs(f"Skill {index}", 1 + index % 5) for index in range(7)]
        observations += [obs("Skill 0", 5), obs("Skill 6", 1)]

        result = compute_skill_averages(observations)

        assert len(result.all_skills) == 7
        assert result.strengths == result.all_skills[:5]
        assert list(reversed(result.growth_opportunities)) == result.all_skills[-5:]
        assert result.growth_opportunities[0] == result.all_skills[-1]

    def test_sparse_data_overlaps_rankings(self) -> None:
        result = compute_skill_averages([obs("QA", 5), obs("Testing", 3), obs("English", 1)])

        assert [item.skill_name for item in result.strengths] == ["QA", "Testing", "English"]
        assert [item.skill_name for item in result.growth_opportunities] == [
            "English",
            "Testing",
            "QA",
        ]

    def test_unrated_skills_are_absent(self) -> None:
        result = compute_skill_averages([obs("QA", 4)])

        for ranking in (result.all_skills, result.strengths, result.growth_opportunities):
            assert [item.skill_name for item in ranking] == ["QA"]

    def test_empty_input(self) -> None:
        result = compute_skill_averages([])
        assert result.all_skills == []
        assert result.strengths == []
        assert result.growth_opportunities == []

    def test_means_stay_within_bounds(self) -> None:
        rng = random.Random(7)
        observations = [
            obs(f"Skill {rng.randrange(15)}", rng.randint(1, 5)) for _ in range(300)
        ]

        for item in compute_skill_averages(observations).all_skills:
            assert 1 <= item.average_rating <= 5
            assert item.min_rating <= item.average_rating <= item.max_rating

    @pytest.mark.parametrize("rating", [0, 6, True, 3.5])
    def test_bad_rating_rejects_whole_computation(self, rating) -> None:
        with pytest.raises(InvalidObservationError):
            compute_skill_averages([obs("QA", 4), obs("Testing", rating)])

    def test_observation_without_skill_rejected(self) -> None:
        bad = Observation(skill_id="", skill_name="", rating=3, task_date=date(2024, 1, 1))
        with pytest.raises(InvalidObservationError):
            compute_skill_averages([bad])


class TestTrends:
    def test_weekly_buckets_follow_monday_rule(self) -> None:
        trends = compute_trends(
            [
                obs("Testing", 4, "2024-01-02"),
                obs("Testing", 5, "2024-01-08"),
                obs("Testing", 3, "2024-01-15"),
            ],
            "week",
        )

        assert [(t.period, t.average_rating, t.rating_count) for t in trends] == [
            (date(2024, 1, 1), 4.0, 1),
            (date(2024, 1, 8), 5.0, 1),
            (date(2024, 1, 15), 3.0, 1),
        ]

    def test_same_week_ratings_are_averaged(self) -> None:
        trends = compute_trends(
            [obs("Testing", 4, "2024-01-02"), obs("Testing", 5, "2024-01-07")],
            BucketGranularity.WEEK,
        )

        assert len(trends) == 1
        assert trends[0].period == date(2024, 1, 1)
        assert trends[0].average_rating == 4.5
        assert trends[0].rating_count == 2

    def test_monthly_buckets(self) -> None:
        trends = compute_trends(
            [
                obs("QA", 2, "2024-01-31"),
                obs("QA", 4, "2024-01-01"),
                obs("QA", 5, "2024-02-01"),
            ],
            "month",
        )

        assert [(t.period, t.average_rating) for t in trends] == [
            (date(2024, 1, 1), 3.0),
            (date(2024, 2, 1), 5.0),
        ]

    def test_sorted_by_period_across_skills(self) -> None:
        trends = compute_trends(
            [
                obs("QA", 3, "2024-02-20"),
                obs("Analysis", 4, "2024-01-03"),
                obs("QA", 5, "2024-01-04"),
            ],
            "week",
        )

        periods = [trend.period for trend in trends]
        assert periods == sorted(periods)
        assert [(t.skill_name, t.period) for t in trends][:2] == [
            ("Analysis", date(2024, 1, 1)),
            ("QA", date(2024, 1, 1)),
        ]

    def test_every_observation_lands_in_exactly_one_bucket(self) -> None:
        rng = random.Random(11)
        start = date(2024, 1, 1)
        observations = [
            obs(
                rng.choice(["QA", "Testing", "English"]),
                rng.randint(1, 5),
                start + timedelta(days=rng.randrange(120)),
            )
            for _ in range(250)
        ]

        for granularity in BucketGranularity:
            trends = compute_trends(observations, granularity)
            for skill in ("QA", "Testing", "English"):
                expected = sum(1 for item in observations if item.skill_name == skill)
                counted = sum(t.rating_count for t in trends if t.skill_name == skill)
                assert counted == expected

    def test_empty_input(self) -> None:
        assert compute_trends([], "week") == []


class TestPerformanceSummary:
    def test_empty_task_set_is_all_zero(self) -> None:
        summary = compute_performance_summary([], [obs("QA", 5)])

        assert summary.total_tasks == 0
        assert summary.overall_average == 0
        assert summary.on_time_delivery_rate == 0
        assert summary.manager_issues_rate == 0
        assert summary.manager_helped_rate == 0
        assert summary.skill_averages == []
        assert summary.strengths == []
        assert summary.growth_opportunities == []

    def test_rates_are_percentages(self) -> None:
        tasks = [
            flags(on_time=True, issues=True),
            flags(on_time=True),
            flags(on_time=True),
            flags(),
        ]

        summary = compute_performance_summary(tasks, [obs("QA", 4)])

        assert summary.total_tasks == 4
        assert summary.on_time_delivery_rate == 75.0
        assert summary.manager_issues_rate == 25.0
        assert summary.manager_helped_rate == 0.0

    def test_overall_average_is_mean_of_skill_means(self) -> None:
        observations = [obs("QA", 5), obs("QA", 5), obs("QA", 5), obs("English", 1)]

        summary = compute_performance_summary([flags()], observations)

        # A mean over raw ratings would be 4.0
        assert summary.overall_average == 3.0
        assert [item.skill_name for item in summary.skill_averages] == ["QA", "English"]
        assert summary.strengths[0].skill_name == "QA"
        assert summary.growth_opportunities[0].skill_name == "English"

    def test_tasks_without_ratings(self) -> None:
        summary = compute_performance_summary([flags(helped=True)], [])

        assert summary.total_tasks == 1
        assert summary.overall_average == 0.0
        assert summary.manager_helped_rate == 100.0
        assert summary.skill_averages == []
