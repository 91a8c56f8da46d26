# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Process startup and shutdown.

Whatever hosts the core (a web app, a worker, a script) calls startup()
once before using any service and shutdown() when it is done, or wraps
its run in lifespan().

Example:
    async with lifespan() as settings:
        async with get_session() as session:
            feed = await ContentService(session, settings).feed_for(identity)
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from src.core.config import Settings, get_settings
from src.infrastructure.database import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_session,
    init_database,
)
from src.infrastructure.database.seeds import seed_age_groups
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def startup(settings: Settings | None = None, seed: bool = True) -> Settings:
    """Configure logging and open the database pool.

    Args:
        settings: Settings to use. Defaults to get_settings().
        seed: Fill the age group catalog when it is empty.

    Returns:
        The settings in effect.

    Raises:
        DatabaseError: If the connection pool cannot be created.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    logger.info(
        "starting_cdc_admin_core",
        environment=settings.environment,
        debug=settings.debug,
    )

    await init_database(settings)

    if not await check_database_connection():
        logger.warning("database_unreachable", host=settings.database.host)
        return settings

    if seed:
        try:
            async with get_session() as session:
                await seed_age_groups(session)
        except DatabaseError as e:
            logger.warning("reference_seed_failed", error=str(e))

    return settings


async def shutdown() -> None:
    """Close the database pool."""
    await close_database()
    logger.info("cdc_admin_core_stopped")


@asynccontextmanager
async def lifespan(settings: Settings | None = None) -> AsyncGenerator[Settings, None]:
    """Run startup() on entry and shutdown() on exit."""
    active = await startup(settings)
    try:
        yield active
    finally:
        await shutdown()
