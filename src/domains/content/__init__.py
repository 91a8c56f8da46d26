# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content domain package.

This package provides:
- ContentTargeting: role, tenant, age and geography visibility rules
- ContentService: publishing, feeds, child activities and deletion
"""

from src.domains.content.service import ContentNotFoundError, ContentService, ContentServiceError
from src.domains.content.targeting import ContentTargeting, Viewer

__all__ = [
    "ContentTargeting",
    "Viewer",
    "ContentService",
    "ContentServiceError",
    "ContentNotFoundError",
]
