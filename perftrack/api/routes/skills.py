from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from perftrack.api.deps import get_current_user, get_db_session, require_roles
from perftrack.api.schemas.skills import (
    PriorityOption,
    RatingScaleItem,
    RatingScaleResponse,
    SkillCreate,
    SkillItem,
    SkillsResponse,
    SkillUpdate,
)
from perftrack.domain import User
from perftrack.domain.reference_data import (
    PRIORITY_OPTIONS,
    RATING_DESCRIPTIONS,
    RATING_LABELS,
)
from perftrack.domain.services.skills import SkillExistsError, SkillNotFoundError, SkillService
from perftrack.infrastructure.db.models import Skill

router = APIRouter(prefix="/skills", tags=["Skills"])
logger = structlog.get_logger()


def _to_item(skill: Skill) -> SkillItem:
    return SkillItem(
        id=skill.id,
        name=skill.name,
        is_active=skill.is_active,
        created_at=skill.created_at,
        updated_at=skill.updated_at,
    )


@router.get("", response_model=SkillsResponse)
async def list_skills(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
) -> SkillsResponse:
    """Active skills every task must be rated against, ordered by name."""
    skills = await SkillService(session).list_active()
    return SkillsResponse(skills=[_to_item(skill) for skill in skills])


@router.get("/rating-scale", response_model=RatingScaleResponse)
async def rating_scale() -> RatingScaleResponse:
    return RatingScaleResponse(
        ratings=[
            RatingScaleItem(value=value, label=label, description=RATING_DESCRIPTIONS[value])
            for value, label in RATING_LABELS.items()
        ],
        priorities=[PriorityOption(**option) for option in PRIORITY_OPTIONS],
    )


@router.post("", response_model=SkillItem, status_code=status.HTTP_201_CREATED)
async def create_skill(
    payload: SkillCreate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_roles(["admin"])),
) -> SkillItem:
    """Add a skill to the catalog (admin-only)."""
    try:
        skill = await SkillService(session).create(name=payload.name, is_active=payload.is_active)
    except SkillExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    logger.info("skill_created", skill_id=skill.id, skill_name=skill.name, admin_user=user.user_id)
    return _to_item(skill)


@router.patch("/{skill_id}", response_model=SkillItem)
async def update_skill(
    skill_id: str,
    payload: SkillUpdate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_roles(["admin"])),
) -> SkillItem:
    """Rename, reactivate or deactivate a skill (admin-only)."""
    try:
        skill = await SkillService(session).update(
            skill_id, name=payload.name, is_active=payload.is_active
        )
    except SkillNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SkillExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    logger.info(
        "skill_updated",
        skill_id=skill.id,
        admin_user=user.user_id,
        updated_fields=list(payload.model_dump(exclude_unset=True)),
    )
    return _to_item(skill)


@router.delete("/{skill_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def deactivate_skill(
    skill_id: str,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_roles(["admin"])),
) -> None:
    """Soft delete: the skill stops being required on new ratings (admin-only)."""
    try:
        skill = await SkillService(session).deactivate(skill_id)
    except SkillNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    logger.info("skill_deactivated", skill_id=skill.id, admin_user=user.user_id)
