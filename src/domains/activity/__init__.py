# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Activity domain package.

This package provides the ActivityService for managing a CDC's
take-home activities.
"""

from src.domains.activity.service import (
    ActivityNotFoundError,
    ActivityService,
    ActivityServiceError,
    UnknownAgeGroupError,
)

__all__ = [
    "ActivityService",
    "ActivityServiceError",
    "ActivityNotFoundError",
    "UnknownAgeGroupError",
]
