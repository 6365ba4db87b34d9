"""Skill catalog: seeding, admin maintenance and the active-skill snapshot."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from perftrack.core.config import get_settings
from perftrack.domain.reference_data import MAX_RATING, MIN_RATING, SKILL_NAMES
from perftrack.infrastructure.db.models import Skill

if TYPE_CHECKING:
    from sqlalchemy import Select

logger = structlog.get_logger()


class SkillNotFoundError(Exception):
    """Raised when a skill id does not exist."""


class SkillExistsError(Exception):
    """Raised when a skill name is already taken."""


class RatingValidationError(ValueError):
    """Raised when a rating map does not cover the active skills with valid scores."""


@dataclass(frozen=True, slots=True)
class SkillRef:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class ActiveSkillSnapshot:
    skills: tuple[SkillRef, ...]
    loaded_at: float

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(skill.id for skill in self.skills)

    def ids_by_name(self) -> dict[str, str]:
        return {skill.name: skill.id for skill in self.skills}


@dataclass
class ActiveSkillCache:
    """Process-wide snapshot of the active skills, refreshed on a TTL."""

    ttl_seconds: float
    clock: Callable[[], float] = time.monotonic
    _snapshot: ActiveSkillSnapshot | None = field(default=None, init=False)

    def is_stale(self) -> bool:
        if self._snapshot is None:
            return True
        return self.clock() - self._snapshot.loaded_at >= self.ttl_seconds

    async def get(self, session: AsyncSession) -> ActiveSkillSnapshot:
        snapshot = self._snapshot
        if snapshot is None or self.is_stale():
            skills = await list_active_skills(session)
            snapshot = ActiveSkillSnapshot(
                skills=tuple(SkillRef(id=skill.id, name=skill.name) for skill in skills),
                loaded_at=self.clock(),
            )
            self._snapshot = snapshot
            logger.debug("active_skills_refreshed", count=len(skills))
        return snapshot

    def invalidate(self) -> None:
        self._snapshot = None


_active_skill_cache: ActiveSkillCache | None = None


def get_active_skill_cache() -> ActiveSkillCache:
    global _active_skill_cache

    if _active_skill_cache is None:
        _active_skill_cache = ActiveSkillCache(ttl_seconds=get_settings().skill_cache_ttl_seconds)
    return _active_skill_cache


def validate_rating_map(ratings: Mapping[str, int], active_skill_ids: Iterable[str]) -> None:
    """Require exactly one 1-5 integer rating per active skill."""
    expected = set(active_skill_ids)
    provided = set(ratings)

    missing = expected - provided
    unknown = provided - expected
    if missing or unknown:
        parts = []
        if missing:
            parts.append(f"{len(missing)} skill(s) not rated")
        if unknown:
            parts.append(f"{len(unknown)} unknown or inactive skill(s)")
        raise RatingValidationError(f"All skills must be rated ({', '.join(parts)})")

    for skill_id, rating in ratings.items():
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise RatingValidationError(f"Rating for skill {skill_id} must be an integer")
        if not MIN_RATING <= rating <= MAX_RATING:
            raise RatingValidationError(
                f"Rating for skill {skill_id} must be between {MIN_RATING} and {MAX_RATING}"
            )


async def list_active_skills(session: AsyncSession) -> list[Skill]:
    stmt: Select[tuple[Skill]] = (
        select(Skill).where(Skill.is_active == True).order_by(Skill.name)  # noqa: E712
    )
    return list((await session.execute(stmt)).scalars().all())


async def seed_skills(session: AsyncSession, names: Iterable[str] = SKILL_NAMES) -> int:
    """Insert any missing catalog skills. Returns the number inserted."""
    existing = set((await session.execute(select(Skill.name))).scalars().all())
    missing = [name for name in names if name not in existing]
    for name in missing:
        session.add(Skill(name=name, is_active=True))
    if missing:
        await session.commit()
        get_active_skill_cache().invalidate()
    logger.info("skills_seeded", inserted=len(missing), existing=len(existing))
    return len(missing)


class SkillService:
    """Admin maintenance of the skill catalog. Skills are never hard-deleted."""

    def __init__(self, session: AsyncSession, cache: ActiveSkillCache | None = None) -> None:
        self.session = session
        self.cache = cache or get_active_skill_cache()

    async def list_active(self) -> list[Skill]:
        return await list_active_skills(self.session)

    async def get(self, skill_id: str) -> Skill:
        skill = await self.session.get(Skill, skill_id)
        if skill is None:
            raise SkillNotFoundError(f"Skill {skill_id} not found")
        return skill

    async def create(self, *, name: str, is_active: bool = True) -> Skill:
        skill = Skill(name=name.strip(), is_active=is_active)
        self.session.add(skill)
        await self._commit_unique(skill.name)
        await self.session.refresh(skill)
        self.cache.invalidate()
        return skill

    async def update(
        self, skill_id: str, *, name: str | None = None, is_active: bool | None = None
    ) -> Skill:
        skill = await self.get(skill_id)
        if name is not None:
            skill.name = name.strip()
        if is_active is not None:
            skill.is_active = is_active
        await self._commit_unique(skill.name)
        await self.session.refresh(skill)
        self.cache.invalidate()
        return skill

    async def deactivate(self, skill_id: str) -> Skill:
        """Deactivation only changes which skills new ratings must cover."""
        return await self.update(skill_id, is_active=False)

    async def _commit_unique(self, name: str) -> None:
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise SkillExistsError(f"Skill '{name}' already exists") from exc
