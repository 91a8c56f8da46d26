# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance domain package.

This package provides the AttendanceService for daily marks, CDC
listings, attendance rates and the weekly summary.
"""

from src.domains.attendance.service import (
    AttendanceService,
    AttendanceServiceError,
    StudentNotFoundError,
)

__all__ = [
    "AttendanceService",
    "AttendanceServiceError",
    "StudentNotFoundError",
]
