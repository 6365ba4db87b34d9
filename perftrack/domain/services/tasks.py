"""Task store: owner-scoped task records and their per-skill ratings."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload
from perftrack.domain.services.skills import (
    ActiveSkillCache,
    get_active_skill_cache,
    validate_rating_map,
)
from perftrack.infrastructure.db.models import SkillRating, Task, TaskPriority
from perftrack.infrastructure.db.session import STORAGE_ERRORS

if TYPE_CHECKING:
    from sqlalchemy import Select

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 50


class TaskNotFoundError(Exception):
    """Raised when a task does not exist."""


class TaskNotOwnedError(Exception):
    """Raised when the caller does not own the task."""


class TaskPersistenceError(Exception):
    """Raised when a task write fails at the storage layer."""


@dataclass(slots=True)
class TaskFields:
    """Editable task attributes, as submitted by the owner."""

    title: str
    description: str
    task_date: date
    priority: str = TaskPriority.MEDIUM.value
    external_link: str | None = None
    delivered_on_time: bool = False
    manager_found_issues: bool = False
    manager_notes: str | None = None
    manager_helped_analysis: bool = False

    def to_values(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "task_date": self.task_date,
            "priority": TaskPriority(self.priority),
            "external_link": self.external_link or None,
            "delivered_on_time": self.delivered_on_time,
            "manager_found_issues": self.manager_found_issues,
            "manager_notes": self.manager_notes or None,
            "manager_helped_analysis": self.manager_helped_analysis,
        }


@dataclass(slots=True)
class RatingDetail:
    id: str
    skill_id: str
    skill_name: str
    rating: int


@dataclass(slots=True)
class TaskDetail:
    id: str
    user_id: str
    title: str
    description: str
    task_date: date
    external_link: str | None
    priority: str
    delivered_on_time: bool
    manager_found_issues: bool
    manager_notes: str | None
    manager_helped_analysis: bool
    created_at: datetime
    updated_at: datetime
    average_rating: float
    skill_ratings: list[RatingDetail] = field(default_factory=list)


def average_rating(ratings: Sequence[int]) -> float:
    """Arithmetic mean of a task's ratings; 0 for a task without ratings."""
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def to_task_detail(task: Task) -> TaskDetail:
    ratings = sorted(task.skill_ratings, key=lambda item: item.skill.name)
    return TaskDetail(
        id=task.id,
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        task_date=task.task_date,
        external_link=task.external_link,
        priority=task.priority.value,
        delivered_on_time=task.delivered_on_time,
        manager_found_issues=task.manager_found_issues,
        manager_notes=task.manager_notes,
        manager_helped_analysis=task.manager_helped_analysis,
        created_at=task.created_at,
        updated_at=task.updated_at,
        average_rating=average_rating([item.rating for item in ratings]),
        skill_ratings=[
            RatingDetail(
                id=item.id,
                skill_id=item.skill_id,
                skill_name=item.skill.name,
                rating=item.rating,
            )
            for item in ratings
        ],
    )


class TaskService:
    """Create, update, delete and read tasks for their owner."""

    def __init__(self, session: AsyncSession, skill_cache: ActiveSkillCache | None = None) -> None:
        self.session = session
        self.skill_cache = skill_cache or get_active_skill_cache()

    async def create_task(
        self, *, user_id: str, fields: TaskFields, ratings: Mapping[str, int]
    ) -> TaskDetail:
        """Persist a task and its full rating set, or nothing at all.

        The task row is committed before the ratings. If the ratings cannot be
        written the task row is deleted again before the failure is raised.
        """
        await self._validate_ratings(ratings)

        task = Task(user_id=user_id, **fields.to_values())
        self.session.add(task)
        try:
            await self.session.commit()
        except STORAGE_ERRORS as exc:
            await self.session.rollback()
            logger.error("task_insert_failed", user_id=user_id, error=str(exc))
            raise TaskPersistenceError("Failed to create task") from exc

        task_id = task.id
        try:
            await self._insert_ratings(task_id, ratings)
        except STORAGE_ERRORS as exc:
            await self.session.rollback()
            logger.error(
                "task_ratings_insert_failed",
                task_id=task_id,
                user_id=user_id,
                error=str(exc),
            )
            await self._delete_orphaned_task(task_id)
            raise TaskPersistenceError("Failed to save skill ratings") from exc

        logger.info("task_created", task_id=task_id, user_id=user_id, ratings=len(ratings))
        return await self._load_detail(task_id)

    async def update_task(
        self,
        *,
        task_id: str,
        user_id: str,
        fields: TaskFields,
        ratings: Mapping[str, int],
    ) -> TaskDetail:
        """Replace task fields and the entire rating set in one transaction."""
        task = await self._get_owned_for_write(task_id, user_id)
        await self._validate_ratings(ratings)

        for key, value in fields.to_values().items():
            setattr(task, key, value)
        try:
            await self.session.execute(delete(SkillRating).where(SkillRating.task_id == task_id))
            self.session.add_all(self._build_ratings(task_id, ratings))
            await self.session.commit()
        except STORAGE_ERRORS as exc:
            await self.session.rollback()
            logger.error("task_update_failed", task_id=task_id, user_id=user_id, error=str(exc))
            raise TaskPersistenceError("Failed to update task") from exc

        logger.info("task_updated", task_id=task_id, user_id=user_id)
        return await self._load_detail(task_id)

    async def delete_task(self, *, task_id: str, user_id: str) -> None:
        await self._get_owned_for_write(task_id, user_id)
        try:
            await self.session.execute(delete(SkillRating).where(SkillRating.task_id == task_id))
            await self.session.execute(delete(Task).where(Task.id == task_id))
            await self.session.commit()
        except STORAGE_ERRORS as exc:
            await self.session.rollback()
            logger.error("task_delete_failed", task_id=task_id, user_id=user_id, error=str(exc))
            raise TaskPersistenceError("Failed to delete task") from exc

        logger.info("task_deleted", task_id=task_id, user_id=user_id)

    async def list_tasks(
        self,
        *,
        user_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        owner_id: str | None = None,
    ) -> list[TaskDetail]:
        """Page of the caller's tasks, newest task date first."""
        if owner_id is not None and owner_id != user_id:
            raise TaskNotOwnedError("Not authorized to view these tasks")

        stmt: Select[tuple[Task]] = (
            select(Task)
            .where(Task.user_id == user_id)
            .options(selectinload(Task.skill_ratings).joinedload(SkillRating.skill))
            .order_by(Task.task_date.desc(), Task.created_at.desc(), Task.id)
            .limit(limit)
            .offset(offset)
        )
        tasks = (await self.session.execute(stmt)).scalars().all()
        return [to_task_detail(task) for task in tasks]

    async def get_task(self, *, task_id: str, user_id: str) -> TaskDetail:
        await self._get_owned(task_id, user_id)
        return await self._load_detail(task_id)

    async def _validate_ratings(self, ratings: Mapping[str, int]) -> None:
        try:
            snapshot = await self.skill_cache.get(self.session)
        except STORAGE_ERRORS as exc:
            logger.error("active_skills_load_failed", error=str(exc))
            raise TaskPersistenceError("Failed to load active skills") from exc
        validate_rating_map(ratings, snapshot.ids)

    async def _get_owned(self, task_id: str, user_id: str) -> Task:
        task = await self.session.scalar(select(Task).where(Task.id == task_id))
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        if task.user_id != user_id:
            raise TaskNotOwnedError("Not authorized to access this task")
        return task

    async def _get_owned_for_write(self, task_id: str, user_id: str) -> Task:
        try:
            return await self._get_owned(task_id, user_id)
        except STORAGE_ERRORS as exc:
            logger.error("task_lookup_failed", task_id=task_id, user_id=user_id, error=str(exc))
            raise TaskPersistenceError(f"Failed to load task {task_id}") from exc

    def _build_ratings(self, task_id: str, ratings: Mapping[str, int]) -> list[SkillRating]:
        return [
            SkillRating(task_id=task_id, skill_id=skill_id, rating=rating)
            for skill_id, rating in ratings.items()
        ]

    async def _insert_ratings(self, task_id: str, ratings: Mapping[str, int]) -> None:
        self.session.add_all(self._build_ratings(task_id, ratings))
        await self.session.commit()

    async def _delete_orphaned_task(self, task_id: str) -> None:
        try:
            await self.session.execute(delete(Task).where(Task.id == task_id))
            await self.session.commit()
        except STORAGE_ERRORS as exc:
            await self.session.rollback()
            logger.error("task_compensation_failed", task_id=task_id, error=str(exc))
            raise TaskPersistenceError(
                f"Failed to save skill ratings and could not remove task {task_id}"
            ) from exc
        logger.warning("task_rolled_back", task_id=task_id)

    async def _load_detail(self, task_id: str) -> TaskDetail:
        stmt: Select[tuple[Task]] = (
            select(Task)
            .where(Task.id == task_id)
            .options(selectinload(Task.skill_ratings).joinedload(SkillRating.skill))
            .execution_options(populate_existing=True)
        )
        task = await self.session.scalar(stmt)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        return to_task_detail(task)
