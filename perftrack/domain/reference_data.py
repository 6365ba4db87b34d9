from __future__ import annotations

SKILL_NAMES: tuple[str, ...] = (
    "Analysis",
    "Planning",
    "Development",
    "QA",
    "English",
    "Task Comments",
    "Edge Cases Covered",
    "PR Review",
    "Code Quality",
    "Problem Solving",
    "Testing",
    "Debugging",
    "Time Management",
    "Initiative/Proactivity",
    "Mentoring Others",
)

MIN_RATING = 1
MAX_RATING = 5

RATING_LABELS: dict[int, str] = {
    1: "Poor",
    2: "Fair",
    3: "Good",
    4: "Very Good",
    5: "Excellent",
}

RATING_DESCRIPTIONS: dict[int, str] = {
    1: "Significant improvement needed",
    2: "Below expectations",
    3: "Meets expectations",
    4: "Exceeds expectations",
    5: "Outstanding performance",
}

PRIORITY_OPTIONS: tuple[dict[str, str], ...] = (
    {"value": "high", "label": "High"},
    {"value": "medium", "label": "Medium"},
    {"value": "low", "label": "Low"},
)
