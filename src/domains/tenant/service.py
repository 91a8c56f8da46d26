# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""CDC (tenant) service.

This module provides the TenantService class for:
- Registering a CDC together with its location
- Soft-deactivating a CDC
- Listing the CDCs an actor may see
- Loading a TenantDirectory for targeting decisions
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.tenant.directory import TenantDirectory, TenantNotFoundError
from src.infrastructure.database.models.tenant import Cdc, CdcLocation
from src.models.common import Role, TenantStatus
from src.models.person import Geography
from src.models.tenant import Tenant, TenantCreateRequest

if TYPE_CHECKING:
    from src.domains.access.scope import Actor

logger = logging.getLogger(__name__)


class TenantServiceError(Exception):
    """Base exception for tenant service errors."""

    pass


def tenant_from_row(cdc: Cdc) -> Tenant:
    """Convert a CDC row (with its joined location) to a Tenant."""
    location = None
    if cdc.location is not None:
        location = Geography(
            barangay=cdc.location.barangay,
            municipality=cdc.location.municipality,
            province=cdc.location.province,
            region=cdc.location.region,
        )

    try:
        status = TenantStatus(cdc.status)
    except ValueError:
        logger.warning("CDC %s has unknown status %r, treating as deactivated", cdc.cdc_id, cdc.status)
        status = TenantStatus.DEACTIVATED

    return Tenant(id=cdc.cdc_id, name=cdc.name, status=status, location=location)


class TenantService:
    """Service for CDC registration and lookup.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize tenant service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def create_tenant(self, request: TenantCreateRequest) -> Tenant:
        """Register a CDC and its location in one transaction.

        Args:
            request: CDC name and location.

        Returns:
            The created tenant.

        Raises:
            TenantServiceError: If the write fails. Nothing is persisted.
        """
        try:
            location = CdcLocation(
                region=request.region,
                province=request.province,
                municipality=request.municipality,
                barangay=request.barangay,
            )
            cdc = Cdc(
                name=request.name,
                status=TenantStatus.ACTIVE.value,
                location=location,
            )
            self.db.add(cdc)
            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("CDC registration failed for %s: %s", request.name, str(e))
            raise TenantServiceError(f"Failed to register CDC {request.name!r}") from e

        await self.db.refresh(cdc)

        logger.info("CDC registered: %s (%s, %s)", cdc.cdc_id, request.municipality, request.province)

        return tenant_from_row(cdc)

    async def get_tenant(self, tenant_id: int) -> Tenant:
        """Get a CDC by id.

        Raises:
            TenantNotFoundError: If the CDC does not exist.
        """
        cdc = await self._get_cdc(tenant_id)
        return tenant_from_row(cdc)

    async def deactivate_tenant(self, tenant_id: int) -> Tenant:
        """Mark a CDC as deactivated.

        Rows are kept. Deactivated CDCs drop out of listings, targeting
        and every authorization from the next operation on.

        Raises:
            TenantNotFoundError: If the CDC does not exist.
        """
        cdc = await self._get_cdc(tenant_id)
        cdc.status = TenantStatus.DEACTIVATED.value

        await self.db.commit()
        await self.db.refresh(cdc)

        logger.info("CDC deactivated: %s", tenant_id)

        return tenant_from_row(cdc)

    async def list_tenants(self, actor: "Actor") -> list[Tenant]:
        """List the active CDCs visible to an actor.

        - msw: every active CDC
        - focal: active CDCs in the actor's municipality and province
        - parent: the linked child's CDC
        - president, admin, worker: their own CDC
        - anyone else: nothing

        Args:
            actor: Caller as resolved by AccessService.

        Returns:
            Tenants ordered by name.
        """
        if actor.role == Role.PARENT:
            own = actor.linked_student_tenant_id
        else:
            own = actor.tenant_id

        query = select(Cdc).where(Cdc.status == TenantStatus.ACTIVE.value)

        if actor.role in (Role.PRESIDENT, Role.ADMIN, Role.WORKER, Role.PARENT):
            if own is None:
                return []
            query = query.where(Cdc.cdc_id == own)
        elif actor.role == Role.FOCAL:
            if actor.geography is None:
                return []
        elif actor.role != Role.MSW:
            return []

        result = await self.db.execute(query.order_by(Cdc.name))
        tenants = [tenant_from_row(cdc) for cdc in result.scalars().all()]

        if actor.role == Role.FOCAL:
            tenants = [
                tenant
                for tenant in tenants
                if tenant.location is not None and actor.geography.same_locale(tenant.location)
            ]

        return tenants

    async def load_directory(self) -> TenantDirectory:
        """Load every CDC into a TenantDirectory.

        Deactivated CDCs are included so that the directory can report
        them as inactive rather than unknown.
        """
        result = await self.db.execute(select(Cdc))
        return TenantDirectory(tenant_from_row(cdc) for cdc in result.scalars().all())

    async def _get_cdc(self, tenant_id: int) -> Cdc:
        result = await self.db.execute(select(Cdc).where(Cdc.cdc_id == tenant_id))
        cdc = result.scalar_one_or_none()
        if cdc is None:
            raise TenantNotFoundError(f"Tenant {tenant_id} not found")
        return cdc
