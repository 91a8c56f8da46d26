# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant and geography resolution over already-fetched CDC data.

TenantDirectory answers three questions without touching the database:
- which CDC a person or child belongs to
- where a CDC is located
- which municipality/province a viewer is scoped to

Focal persons are not bound to a CDC row. Their geography comes from the
free-text address on their account, split on commas into
``barangay, municipality, province[, region]``. That format is validated
here rather than trusted.
"""

from collections.abc import Iterable

from src.models.common import GEOGRAPHY_SCOPED_ROLES, Role
from src.models.person import Child, Geography, Person
from src.models.tenant import Tenant


class TenantDirectoryError(Exception):
    """Base exception for tenant directory errors."""

    pass


class TenantNotFoundError(TenantDirectoryError):
    """Raised when a CDC id is unknown."""

    pass


class OrphanTenantError(TenantDirectoryError):
    """Raised when a CDC has no location row (data-integrity violation)."""

    pass


class IncompleteAddressError(TenantDirectoryError):
    """Raised when an address cannot be split into its place parts."""

    pass


def parse_address(address: str | None) -> Geography:
    """Split a free-text address into its place parts.

    Args:
        address: Text such as ``Matabungkay, Lian, Batangas``.

    Returns:
        Parsed geography.

    Raises:
        IncompleteAddressError: If fewer than three or more than four
            non-empty parts are present.
    """
    if not address:
        raise IncompleteAddressError("Address is empty")

    parts = [part.strip() for part in address.split(",")]
    parts = [part for part in parts if part]

    if len(parts) < 3:
        raise IncompleteAddressError(
            f"Address needs barangay, municipality and province, got {len(parts)} part(s)"
        )
    if len(parts) > 4:
        raise IncompleteAddressError(f"Address has {len(parts)} parts, expected at most 4")

    return Geography(
        barangay=parts[0],
        municipality=parts[1],
        province=parts[2],
        region=parts[3] if len(parts) == 4 else None,
    )


class TenantDirectory:
    """In-memory view of CDCs and their locations.

    Build one per operation from freshly fetched rows so that status
    changes are never served from a stale copy.

    Example:
        >>> directory = TenantDirectory([tenant])
        >>> directory.location_of(tenant.id).municipality
        'Lian'
    """

    def __init__(self, tenants: Iterable[Tenant]) -> None:
        """Index tenants by id.

        Args:
            tenants: CDC rows with their locations.
        """
        self._tenants = {tenant.id: tenant for tenant in tenants}

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._tenants

    def __len__(self) -> int:
        return len(self._tenants)

    def get(self, tenant_id: int) -> Tenant:
        """Get a CDC by id.

        Raises:
            TenantNotFoundError: If the id is unknown.
        """
        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant {tenant_id} not found")
        return tenant

    def tenant_of(self, person: Person | Child) -> int | None:
        """Get the CDC a person or child belongs to.

        Children always have one. Users may not, depending on role.
        """
        return person.tenant_id

    def is_active(self, tenant_id: int) -> bool:
        """Check whether a CDC exists and is active."""
        tenant = self._tenants.get(tenant_id)
        return tenant is not None and tenant.is_active

    def location_of(self, tenant_id: int) -> Geography:
        """Get the location of a CDC.

        Raises:
            TenantNotFoundError: If the id is unknown.
            OrphanTenantError: If the CDC has no location row.
        """
        tenant = self.get(tenant_id)
        if tenant.location is None:
            raise OrphanTenantError(f"Tenant {tenant_id} has no location")
        return tenant.location

    def resolve_viewer_geography(self, person: Person) -> Geography:
        """Resolve the place a viewer is scoped to.

        Geography-scoped roles use their account address. Everyone else
        uses the location of their CDC.

        Raises:
            IncompleteAddressError: If a geography-scoped address is malformed.
            TenantNotFoundError: If a tenant-bound viewer has no known CDC.
            OrphanTenantError: If the viewer's CDC has no location.
        """
        if person.role in GEOGRAPHY_SCOPED_ROLES or person.role == Role.MSW:
            return parse_address(person.address)

        tenant_id = self.tenant_of(person)
        if tenant_id is None:
            raise TenantNotFoundError(f"User {person.id} has no tenant")
        return self.location_of(tenant_id)
