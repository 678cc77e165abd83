"""Reference data every deployment needs."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.db.models import Role

logger = structlog.get_logger()

ROLE_SEED_DATA: list[str] = ["walker", "admin"]


async def seed_roles(db: AsyncSession) -> int:
    """Insert any missing roles. Returns how many were created."""
    existing = set((await db.execute(select(Role.name))).scalars().all())
    created = 0
    for name in ROLE_SEED_DATA:
        if name not in existing:
            db.add(Role(name=name))
            created += 1
    await db.commit()
    if created:
        logger.info("roles_seeded", created=created)
    return created
