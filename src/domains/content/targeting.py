# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content visibility for announcements, classwork and take-home activities.

Rules, evaluated in order and short-circuiting on the first failure:

1. Role: the viewer's role is in the item's role filter.
2. Tenant: broadcast items (no CDC) pass; CDC-bound items need the
   viewer's CDC. A parent's CDC is their linked child's CDC.
3. Age: when the viewer resolves to a child, the item targets ``all`` or
   the child's band.
4. Geography: focal viewers skip rule 2. They see CDC-bound items whose
   CDC is in their municipality and province, and never broadcast items.

A missing prerequisite (no CDC, no geography, orphan CDC) hides the item.
It is never an error.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.domains.age.bands import AgeBandTable
from src.domains.tenant.directory import TenantDirectory, TenantDirectoryError
from src.models.common import ALL_AGES, GEOGRAPHY_SCOPED_ROLES, Role
from src.models.content import ContentItem
from src.models.person import ChildStanding, Geography

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewer:
    """Resolved identity of whoever is looking at content.

    Attributes:
        role: Viewer role.
        tenant_id: Viewer CDC; for parents, the linked child's CDC.
        child: Child the viewer acts for, with age at the reference date.
        geography: Place of a geography-scoped viewer.
    """

    role: Role
    tenant_id: int | None = None
    child: ChildStanding | None = None
    geography: Geography | None = None

    @classmethod
    def for_parent(cls, child: ChildStanding) -> "Viewer":
        """Build the viewer of a parent acting for their child."""
        return cls(role=Role.PARENT, tenant_id=child.tenant_id, child=child)


class ContentTargeting:
    """Decides which content items a viewer may see.

    Example:
        >>> targeting = ContentTargeting(directory, AgeBandTable.canonical())
        >>> targeting.visible(item, Viewer.for_parent(child))
        True
    """

    def __init__(self, directory: TenantDirectory, bands: AgeBandTable) -> None:
        """Initialize with the data the rules need.

        Args:
            directory: CDCs and their locations.
            bands: Band catalog used to classify child viewers.
        """
        self._directory = directory
        self._bands = bands

    def visible(self, item: ContentItem, viewer: Viewer) -> bool:
        """Check whether a viewer may see an item."""
        if viewer.role not in item.role_filter:
            return False

        geography_scoped = viewer.role in GEOGRAPHY_SCOPED_ROLES

        if not geography_scoped and not self._matches_tenant(item, viewer):
            return False

        if viewer.child is not None and not self._matches_age(item, viewer.child):
            return False

        if geography_scoped:
            return self._matches_geography(item, viewer)

        return True

    def filter(self, items: Iterable[ContentItem], viewer: Viewer) -> list[ContentItem]:
        """Keep the visible items, preserving order."""
        return [item for item in items if self.visible(item, viewer)]

    def _matches_tenant(self, item: ContentItem, viewer: Viewer) -> bool:
        if item.tenant_id is None:
            return True
        return viewer.tenant_id is not None and item.tenant_id == viewer.tenant_id

    def _matches_age(self, item: ContentItem, child: ChildStanding) -> bool:
        if item.age_filter == ALL_AGES:
            return True
        band = self._bands.classify(child.total_months)
        return band is not None and band == item.age_filter

    def _matches_geography(self, item: ContentItem, viewer: Viewer) -> bool:
        # Broadcast items are never matched by place
        if item.tenant_id is None or viewer.geography is None:
            return False

        try:
            if not self._directory.is_active(item.tenant_id):
                return False
            location = self._directory.location_of(item.tenant_id)
        except TenantDirectoryError as e:
            logger.warning("Hiding content %s: %s", item.id, e)
            return False

        return viewer.geography.same_locale(location)
