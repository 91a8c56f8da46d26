# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access domain package.

This package provides:
- authorize: pure role x operation decision table
- AccessService: actor and target resolution against the data store
"""

from src.domains.access.scope import (
    PERMISSIONS,
    AccessDecision,
    AccessDeniedError,
    AccessTarget,
    Actor,
    Allow,
    ChildScope,
    Deny,
    DenyReason,
    GeographyScope,
    Operation,
    Scope,
    TenantScope,
    Unrestricted,
    authorize,
)
from src.domains.access.service import AccessService

__all__ = [
    "authorize",
    "Operation",
    "PERMISSIONS",
    "Actor",
    "AccessTarget",
    "AccessDecision",
    "Allow",
    "Deny",
    "DenyReason",
    "Scope",
    "TenantScope",
    "ChildScope",
    "GeographyScope",
    "Unrestricted",
    "AccessDeniedError",
    "AccessService",
]
