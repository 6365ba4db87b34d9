from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from perftrack.api.deps import get_current_user, get_db_session
from perftrack.api.schemas.tasks import TaskListResponse, TaskResponse, TaskSubmission
from perftrack.domain import User
from perftrack.domain.services.skills import RatingValidationError
from perftrack.domain.services.tasks import (
    DEFAULT_PAGE_SIZE,
    TaskDetail,
    TaskFields,
    TaskNotFoundError,
    TaskNotOwnedError,
    TaskPersistenceError,
    TaskService,
)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def _fields(payload: TaskSubmission) -> TaskFields:
    return TaskFields(
        title=payload.title,
        description=payload.description,
        task_date=payload.task_date,
        priority=payload.priority.value,
        external_link=payload.external_link,
        delivered_on_time=payload.delivered_on_time,
        manager_found_issues=payload.manager_found_issues,
        manager_notes=payload.manager_notes,
        manager_helped_analysis=payload.manager_helped_analysis,
    )


def _to_response(detail: TaskDetail) -> TaskResponse:
    return TaskResponse(**asdict(detail))


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskSubmission,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> TaskResponse:
    """Submit a completed task with a rating for every active skill."""
    service = TaskService(session)
    try:
        detail = await service.create_task(
            user_id=user.user_id, fields=_fields(payload), ratings=payload.skill_ratings
        )
    except RatingValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except TaskPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return _to_response(detail)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: str | None = Query(None, description="Defaults to the caller; others are refused"),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> TaskListResponse:
    """Caller's tasks ordered by task date, newest first, with average ratings."""
    service = TaskService(session)
    try:
        tasks = await service.list_tasks(
            user_id=user.user_id, limit=limit, offset=offset, owner_id=user_id
        )
    except TaskNotOwnedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return TaskListResponse(
        tasks=[_to_response(task) for task in tasks], limit=limit, offset=offset
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> TaskResponse:
    service = TaskService(session)
    try:
        detail = await service.get_task(task_id=task_id, user_id=user.user_id)
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except TaskNotOwnedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return _to_response(detail)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    payload: TaskSubmission,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> TaskResponse:
    """Replace a task's fields and its whole rating set."""
    service = TaskService(session)
    try:
        detail = await service.update_task(
            task_id=task_id,
            user_id=user.user_id,
            fields=_fields(payload),
            ratings=payload.skill_ratings,
        )
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except TaskNotOwnedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except RatingValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except TaskPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return _to_response(detail)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def delete_task(
    task_id: str,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> None:
    """Delete a task together with its ratings."""
    service = TaskService(session)
    try:
        await service.delete_task(task_id=task_id, user_id=user.user_id)
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except TaskNotOwnedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except TaskPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
