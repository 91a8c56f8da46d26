# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database seed package.

Static reference data: the age group catalog.
"""

from src.infrastructure.database.seeds.reference import DEFAULT_AGE_RANGES, seed_age_groups

__all__ = ["DEFAULT_AGE_RANGES", "seed_age_groups"]
