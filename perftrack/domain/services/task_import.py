from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from perftrack.domain.services.observations import (
    InvalidObservationError,
    coerce_date,
    normalize_related,
)
from perftrack.domain.services.skills import (
    ActiveSkillSnapshot,
    RatingValidationError,
    get_active_skill_cache,
)
from perftrack.domain.services.tasks import TaskFields, TaskPersistenceError, TaskService
from perftrack.infrastructure.db.models import TaskPriority

logger = structlog.get_logger()


@dataclass(slots=True)
class ImportFailure:
    index: int
    title: str | None
    reason: str


@dataclass(slots=True)
class ImportResult:
    created: list[str] = field(default_factory=list)
    failed: list[ImportFailure] = field(default_factory=list)


def parse_task_fields(record: Mapping[str, Any]) -> TaskFields:
    title = record.get("title")
    if not title:
        raise InvalidObservationError("Task record is missing a title")
    priority = str(record.get("priority") or TaskPriority.MEDIUM.value)
    if priority not in {item.value for item in TaskPriority}:
        raise InvalidObservationError(f"Unknown priority: {priority}")
    return TaskFields(
        title=str(title),
        description=str(record.get("description") or ""),
        task_date=coerce_date(record.get("task_date")),
        priority=priority,
        external_link=record.get("external_link"),
        delivered_on_time=bool(record.get("delivered_on_time")),
        manager_found_issues=bool(record.get("manager_found_issues")),
        manager_notes=record.get("manager_notes"),
        manager_helped_analysis=bool(record.get("manager_helped_analysis")),
    )


def parse_rating_map(
    rating_records: Iterable[Mapping[str, Any]], snapshot: ActiveSkillSnapshot
) -> dict[str, int]:
    """Map exported ratings onto current skill ids, matching by id then by name."""
    known_ids = snapshot.ids
    ids_by_name = snapshot.ids_by_name()

    ratings: dict[str, int] = {}
    for item in rating_records:
        skill = normalize_related(item.get("skill")) or {}
        skill_id = skill.get("id") or item.get("skill_id")
        if skill_id not in known_ids:
            skill_id = ids_by_name.get(skill.get("name", ""))
        if skill_id is None:
            raise InvalidObservationError(
                f"Rating references an unknown skill: {skill.get('name') or item.get('skill_id')}"
            )
        if skill_id in ratings:
            raise InvalidObservationError(f"Skill {skill_id} is rated more than once")
        ratings[skill_id] = item.get("rating")  # type: ignore[assignment]
    return ratings


class TaskImportService:
    """Create tasks from an exported JSON document through the task store."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.tasks = TaskService(session)

    async def import_records(
        self, *, user_id: str, records: Iterable[Mapping[str, Any]]
    ) -> ImportResult:
        snapshot = await get_active_skill_cache().get(self.session)
        result = ImportResult()

        for index, record in enumerate(records):
            try:
                fields = parse_task_fields(record)
                ratings = parse_rating_map(record.get("skill_ratings") or [], snapshot)
                detail = await self.tasks.create_task(
                    user_id=user_id, fields=fields, ratings=ratings
                )
            except (InvalidObservationError, RatingValidationError, TaskPersistenceError) as exc:
                logger.warning("task_import_failed", index=index, reason=str(exc))
                result.failed.append(
                    ImportFailure(index=index, title=record.get("title"), reason=str(exc))
                )
                continue
            result.created.append(detail.id)

        logger.info(
            "task_import_finished",
            user_id=user_id,
            created=len(result.created),
            failed=len(result.failed),
        )
        return result
