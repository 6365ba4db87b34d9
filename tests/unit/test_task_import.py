from __future__ import annotations

import pytest
from perftrack.domain.services.observations import InvalidObservationError
from perftrack.domain.services.skills import get_active_skill_cache
from perftrack.domain.services.task_import import (
    TaskImportService,
    parse_rating_map,
    parse_task_fields,
)
from perftrack.domain.services.tasks import TaskService
from sqlalchemy.ext.asyncio import AsyncSession


def exported_record(skills, *, title: str = "Imported task", **overrides) -> dict:
    record = {
        "title": title,
        "description": "Carried over from the previous tracker",
        "task_date": "2024-01-02T09:30:00+00:00",
        "priority": "low",
        "delivered_on_time": True,
        "skill_ratings": [
            {"rating": 4, "skill": [{"id": skill["id"], "name": skill["name"]}]}
            for skill in skills
        ],
    }
    record.update(overrides)
    return record


def test_parse_task_fields_defaults() -> None:
    fields = parse_task_fields({"title": "Minimal", "task_date": "2024-03-05"})

    assert fields.priority == "medium"
    assert fields.description == ""
    assert fields.delivered_on_time is False
    assert str(fields.task_date) == "2024-03-05"


@pytest.mark.parametrize(
    "record",
    [
        {"task_date": "2024-03-05"},
        {"title": "No date"},
        {"title": "Bad priority", "task_date": "2024-03-05", "priority": "urgent"},
    ],
)
def test_parse_task_fields_rejects_bad_records(record: dict) -> None:
    with pytest.raises(InvalidObservationError):
        parse_task_fields(record)


class TestParseRatingMap:
    async def test_matches_by_name_when_ids_differ(self, db: AsyncSession, skills) -> None:
        snapshot = await get_active_skill_cache().get(db)
        records = [
            {"rating": 2, "skill": {"id": "legacy-id", "name": skill["name"]}} for skill in skills
        ]

        ratings = parse_rating_map(records, snapshot)

        assert set(ratings) == {skill["id"] for skill in skills}

    async def test_unknown_skill_rejected(self, db: AsyncSession) -> None:
        snapshot = await get_active_skill_cache().get(db)

        with pytest.raises(InvalidObservationError, match="unknown skill"):
            parse_rating_map([{"rating": 2, "skill": {"name": "Juggling"}}], snapshot)

    async def test_duplicate_skill_rejected(self, db: AsyncSession, skills) -> None:
        snapshot = await get_active_skill_cache().get(db)
        record = {"rating": 2, "skill_id": skills[0]["id"]}

        with pytest.raises(InvalidObservationError, match="more than once"):
            parse_rating_map([record, record], snapshot)


async def test_import_keeps_going_past_bad_records(db: AsyncSession, skills) -> None:
    records = [
        exported_record(skills, title="Good one"),
        exported_record(skills[:3], title="Missing ratings"),
        exported_record(skills, title=""),
        exported_record(skills, title="Good two", task_date="2024-01-09"),
    ]

    result = await TaskImportService(db).import_records(user_id="user-1", records=records)

    assert len(result.created) == 2
    assert [failure.index for failure in result.failed] == [1, 2]
    assert "All skills must be rated" in result.failed[0].reason

    imported = await TaskService(db).list_tasks(user_id="user-1")
    assert [task.title for task in imported] == ["Good two", "Good one"]
    assert all(task.average_rating == 4.0 for task in imported)
