# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Age domain package.

This package provides the shared age computation and age-band logic:
- compute_age: completed years/months at an explicit reference date
- AgeBandTable: catalog parsing and first-match classification
- Canonical bands as calendar birthdate windows
"""

from src.domains.age.bands import (
    CANONICAL_BANDS,
    DEFAULT_PLACEHOLDERS,
    AgeBandTable,
    BirthdateWindow,
    ParsedBand,
    UnknownAgeBandError,
    UnparseableRangeError,
    birthdate_window,
    canonical_band_for,
    parse_range,
)
from src.domains.age.clock import AgeError, InvalidAgeError, age_in_months, compute_age

__all__ = [
    "AgeError",
    "InvalidAgeError",
    "UnparseableRangeError",
    "UnknownAgeBandError",
    "compute_age",
    "age_in_months",
    "parse_range",
    "AgeBandTable",
    "ParsedBand",
    "CANONICAL_BANDS",
    "DEFAULT_PLACEHOLDERS",
    "BirthdateWindow",
    "birthdate_window",
    "canonical_band_for",
]
