# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant (CDC) domain package.

This package provides:
- TenantDirectory: tenant and geography resolution over fetched rows
- TenantService: CDC registration, deactivation and scoped listing
"""

from src.domains.tenant.directory import (
    IncompleteAddressError,
    OrphanTenantError,
    TenantDirectory,
    TenantDirectoryError,
    TenantNotFoundError,
    parse_address,
)
from src.domains.tenant.service import TenantService, TenantServiceError

__all__ = [
    "TenantDirectory",
    "TenantDirectoryError",
    "TenantNotFoundError",
    "OrphanTenantError",
    "IncompleteAddressError",
    "parse_address",
    "TenantService",
    "TenantServiceError",
]
