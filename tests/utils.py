from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from perftrack.core.auth import Role, create_access_token


def auth_headers(user_id: str = "employee-1", role: Role = Role.EMPLOYEE) -> dict[str, str]:
    token = create_access_token(user_id, roles=[role.value], email=f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


def ratings_by_name(
    skills: Sequence[Mapping[str, str]],
    overrides: Mapping[str, int] | None = None,
    default: int = 3,
) -> dict[str, int]:
    """Rating map keyed by skill id, with selected skills overridden by name."""
    overrides = overrides or {}
    return {skill["id"]: overrides.get(skill["name"], default) for skill in skills}


def build_task_payload(
    skills: Sequence[Mapping[str, str]],
    *,
    task_date: date | str = "2024-01-08",
    ratings: Mapping[str, int] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Construct a JSON payload for POST /tasks rating every given skill."""
    payload: dict[str, Any] = {
        "title": "Ship the reporting export",
        "description": "Implemented CSV export for the monthly report",
        "task_date": str(task_date),
        "external_link": "https://example.com/pr/42",
        "priority": "medium",
        "delivered_on_time": True,
        "manager_found_issues": False,
        "manager_notes": "",
        "manager_helped_analysis": False,
        "skill_ratings": dict(ratings) if ratings is not None else ratings_by_name(skills),
    }
    payload.update(overrides)
    return payload
