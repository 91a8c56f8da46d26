# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers.

This package contains cross-cutting utilities:
- logging: structlog and stdlib logging through one handler
- datetime: Calendar-date operations in a configured timezone
"""

from src.utils.datetime import as_date, today_in, utc_now, years_before
from src.utils.logging import get_logger, log_context, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "log_context",
    # Datetime
    "utc_now",
    "today_in",
    "as_date",
    "years_before",
]
