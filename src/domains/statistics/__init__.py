# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Statistics domain package."""

from src.domains.statistics.service import AGE_BUCKETS, OVER_AGE, UNDER_AGE, StatisticsService

__all__ = [
    "StatisticsService",
    "AGE_BUCKETS",
    "UNDER_AGE",
    "OVER_AGE",
]
