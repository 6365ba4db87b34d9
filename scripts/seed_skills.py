#!/usr/bin/env python3
"""Seed the skill catalog with the fixed list of rated skills.

Run with:
    python scripts/seed_skills.py
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio

from perftrack.core.logging import setup_logging
from perftrack.domain.services.skills import seed_skills
from perftrack.infrastructure.db.session import get_session_factory


async def main() -> None:
    setup_logging()
    async with get_session_factory()() as session:
        inserted = await seed_skills(session)
    print(f"Seeded {inserted} skill(s)")


if __name__ == "__main__":
    asyncio.run(main())
