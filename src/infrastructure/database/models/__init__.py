# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the CDC database."""

from src.infrastructure.database.models.attendance import Attendance
from src.infrastructure.database.models.base import Base, TimestampMixin
from src.infrastructure.database.models.content import AgeGroup, Announcement, TakeHomeActivity
from src.infrastructure.database.models.homework import ActivitySubmission, Homework
from src.infrastructure.database.models.student import (
    ChildOtherInfo,
    FatherInfo,
    GuardianInfo,
    MotherInfo,
    Student,
)
from src.infrastructure.database.models.tenant import Cdc, CdcLocation
from src.infrastructure.database.models.user import User, UserOtherInfo

__all__ = [
    "Base",
    "TimestampMixin",
    "Cdc",
    "CdcLocation",
    "User",
    "UserOtherInfo",
    "Student",
    "ChildOtherInfo",
    "GuardianInfo",
    "MotherInfo",
    "FatherInfo",
    "AgeGroup",
    "Announcement",
    "TakeHomeActivity",
    "Attendance",
    "Homework",
    "ActivitySubmission",
]
