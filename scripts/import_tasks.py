#!/usr/bin/env python3
"""Import exported tasks (with nested skill ratings) for one user.

Run with:
    python scripts/import_tasks.py <user_id> <export.json>

The export is a JSON list of task objects, each carrying a ``skill_ratings`` list
whose entries hold ``rating`` and a ``skill`` object (or one-element list).
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio
import json

from perftrack.core.logging import setup_logging
from perftrack.domain.services.task_import import TaskImportService
from perftrack.infrastructure.db.session import get_session_factory


async def run(user_id: str, export_path: Path) -> int:
    records = json.loads(export_path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        print("Export must be a JSON list of tasks")
        return 1

    async with get_session_factory()() as session:
        result = await TaskImportService(session).import_records(user_id=user_id, records=records)

    print(f"Created {len(result.created)} task(s), {len(result.failed)} failed")
    for failure in result.failed:
        print(f"  #{failure.index} {failure.title or '<untitled>'}: {failure.reason}")
    return 0 if not result.failed else 2


def main() -> None:
    if len(sys.argv) < 3:
        print("Usage: python scripts/import_tasks.py <user_id> <export.json>")
        sys.exit(1)

    setup_logging()
    sys.exit(asyncio.run(run(sys.argv[1], Path(sys.argv[2]))))


if __name__ == "__main__":
    main()
