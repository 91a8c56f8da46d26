# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reference data seeds.

The age group catalog is static reference data. Rows are inserted only
when the catalog is empty so existing ids keep their meaning.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models.content import AgeGroup

logger = logging.getLogger(__name__)

DEFAULT_AGE_RANGES = (
    "3.1-4.0",
    "4.1-5.0",
    "5.1-5.11",
)


async def seed_age_groups(
    session: AsyncSession,
    ranges: tuple[str, ...] = DEFAULT_AGE_RANGES,
) -> list[AgeGroup]:
    """Seed the age group catalog.

    Args:
        session: Database session.
        ranges: Stored range texts in classification order.

    Returns:
        Created rows, or an empty list when the catalog already has data.
    """
    result = await session.execute(select(func.count()).select_from(AgeGroup))
    if result.scalar():
        logger.info("Age group catalog already populated, skipping")
        return []

    groups = [AgeGroup(age_range=raw) for raw in ranges]
    session.add_all(groups)
    await session.flush()

    logger.info("Seeded %d age groups", len(groups))
    return groups
