"""Rating observations and the record-shape normalization that produces them.

Joined records coming from the storage boundary may carry a related row either as
a single mapping or as a one-element list depending on the query path. Everything
here collapses those shapes into one canonical form before aggregation runs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any


class InvalidObservationError(ValueError):
    """Raised when a rating observation is malformed."""


@dataclass(frozen=True, slots=True)
class Observation:
    """A single (skill, rating, date) fact from one skill rating and its task."""

    skill_id: str
    skill_name: str
    rating: int
    task_date: date
    owner_id: str = ""


def normalize_related(value: Any) -> Mapping[str, Any] | None:
    """Return a related record as a single mapping, or ``None`` when absent."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value
    if isinstance(value, Sequence) and not isinstance(value, str | bytes):
        if not value:
            return None
        if len(value) > 1:
            raise InvalidObservationError(
                f"Expected a single related record, got {len(value)}"
            )
        return normalize_related(value[0])
    raise InvalidObservationError(f"Unsupported related record shape: {type(value).__name__}")


def coerce_date(value: Any) -> date:
    """Reduce a date, datetime or ISO string to its calendar date component."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            # "2024-01-02" and "2024-01-02T00:00:00+00:00" both bucket by the date part
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise InvalidObservationError(f"Invalid task date: {value!r}") from exc
    raise InvalidObservationError(f"Invalid task date: {value!r}")


def observation_from_record(record: Mapping[str, Any], owner_id: str = "") -> Observation:
    """Build an observation from a joined ``{rating, skill, task}`` record."""
    skill = normalize_related(record.get("skill"))
    task = normalize_related(record.get("task"))

    if skill is None or not skill.get("id") or not skill.get("name"):
        raise InvalidObservationError("Rating record is missing its skill")
    if task is None or not task.get("task_date"):
        raise InvalidObservationError("Rating record is missing its task date")

    observation = Observation(
        skill_id=str(skill["id"]),
        skill_name=str(skill["name"]),
        rating=record.get("rating"),  # type: ignore[arg-type]
        task_date=coerce_date(task["task_date"]),
        owner_id=str(task.get("user_id") or owner_id),
    )
    validate_observation(observation)
    return observation


def validate_observation(observation: Observation) -> None:
    rating = observation.rating
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidObservationError(
            f"Rating for skill '{observation.skill_name}' must be an integer 1-5, got {rating!r}"
        )
    if not observation.skill_id or not observation.skill_name:
        raise InvalidObservationError("Observation references an unknown skill")
