# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Aggregate statistics across CDCs for social welfare officers.

Only active CDCs are counted. Children are bucketed with the same
canonical bands used everywhere else, so a child's bucket here matches
the band shown on their record.
"""

import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings, get_settings
from src.domains.access.scope import Operation
from src.domains.access.service import AccessService
from src.domains.age.bands import canonical_band_for
from src.domains.age.clock import InvalidAgeError
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.tenant import Cdc, CdcLocation
from src.models.common import CANONICAL_BAND_LABELS, TenantStatus
from src.models.person import Identity
from src.utils.datetime import today_in, years_before

logger = logging.getLogger(__name__)

UNDER_AGE = "under-3"
OVER_AGE = "over-6"
AGE_BUCKETS = (UNDER_AGE, *CANONICAL_BAND_LABELS, OVER_AGE)


class StatisticsService:
    """Service for cross-CDC aggregates.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize statistics service.

        Args:
            db: Async database session.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        self._settings = settings or get_settings()
        self._access = AccessService(db)

    async def age_distribution(
        self,
        identity: Identity,
        as_of: date | None = None,
        barangay: str | None = None,
        tenant_name: str | None = None,
    ) -> dict[str, int]:
        """Count enrolled children per age bucket.

        Args:
            identity: Caller identity.
            as_of: Reference date for ages.
            barangay: Only count CDCs in this barangay.
            tenant_name: Only count the CDC with this name.

        Returns:
            Counts keyed ``under-3``, ``3-4``, ``4-5``, ``5-6``, ``over-6``
            in that order. Empty buckets are present with zero.

        Raises:
            AccessDeniedError: If the caller may not view aggregates.
        """
        ref = as_of or today_in(self._settings.timezone)
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.VIEW_AGGREGATES)

        query = (
            select(Student.birthdate)
            .join(Cdc, Cdc.cdc_id == Student.cdc_id)
            .join(CdcLocation, CdcLocation.location_id == Cdc.location_id)
            .where(Cdc.status == TenantStatus.ACTIVE.value)
        )
        if barangay:
            query = query.where(CdcLocation.barangay == barangay)
        if tenant_name:
            query = query.where(Cdc.name == tenant_name)

        result = await self.db.execute(query)

        counts = dict.fromkeys(AGE_BUCKETS, 0)
        youngest_band_start = years_before(ref, 3)
        for birthdate in result.scalars().all():
            try:
                band = canonical_band_for(birthdate, ref)
            except InvalidAgeError:
                logger.warning("Ignoring birthdate %s after %s", birthdate, ref)
                continue

            if band is not None:
                counts[band] += 1
            elif birthdate > youngest_band_start:
                counts[UNDER_AGE] += 1
            else:
                counts[OVER_AGE] += 1

        return counts

    async def tenant_distribution(
        self,
        identity: Identity,
        province: str | None = None,
        municipality: str | None = None,
        barangay: str | None = None,
    ) -> dict[str, int]:
        """Count active CDCs per barangay.

        Returns:
            Counts keyed by barangay, in barangay order.

        Raises:
            AccessDeniedError: If the caller may not view aggregates.
        """
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.VIEW_AGGREGATES)

        query = (
            select(CdcLocation.barangay, func.count(func.distinct(Cdc.cdc_id)))
            .join(CdcLocation, CdcLocation.location_id == Cdc.location_id)
            .where(Cdc.status == TenantStatus.ACTIVE.value)
        )
        if province:
            query = query.where(CdcLocation.province == province)
        if municipality:
            query = query.where(CdcLocation.municipality == municipality)
        if barangay:
            query = query.where(CdcLocation.barangay == barangay)

        result = await self.db.execute(
            query.group_by(CdcLocation.barangay).order_by(CdcLocation.barangay)
        )
        return {row[0]: row[1] for row in result.all()}
