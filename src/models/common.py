# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Common enums and constants used across models."""

from enum import Enum


class Role(str, Enum):
    """Account roles.

    UNASSIGNED covers accounts with no role yet and any role string that
    is not recognised.
    """

    PRESIDENT = "president"
    ADMIN = "admin"
    WORKER = "worker"
    PARENT = "parent"
    FOCAL = "focal"
    MSW = "msw"
    UNASSIGNED = "unassigned"

    @classmethod
    def parse(cls, value: "str | Role | None") -> "Role":
        """Parse a stored or token role string, defaulting to UNASSIGNED."""
        if isinstance(value, Role):
            return value
        if not value:
            return cls.UNASSIGNED
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNASSIGNED


# Roles that must belong to exactly one tenant
TENANT_ROLES = frozenset({Role.PRESIDENT, Role.ADMIN, Role.WORKER})

# Roles scoped by municipality/province instead of a tenant row
GEOGRAPHY_SCOPED_ROLES = frozenset({Role.FOCAL})

# Roles a content item may target
TARGETABLE_ROLES = frozenset({Role.WORKER, Role.PRESIDENT, Role.PARENT, Role.FOCAL})


class TenantStatus(str, Enum):
    """CDC lifecycle status. Tenants are soft-deactivated, never deleted."""

    ACTIVE = "active"
    DEACTIVATED = "deactivated"


class ContentKind(str, Enum):
    """Kinds of targeted content."""

    ANNOUNCEMENT = "announcement"
    CLASSWORK = "classwork"
    ACTIVITY = "activity"


# Age filter sentinel meaning "every age band"
ALL_AGES = "all"

# Built-in age bands, in classification order
CANONICAL_BAND_LABELS = ("3-4", "4-5", "5-6")
