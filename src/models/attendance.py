# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance marks, listings and summaries."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttendanceStatus(str, Enum):
    """Attendance mark. Late counts as present in every rate."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    EXCUSED = "Excused"

    @property
    def counts_present(self) -> bool:
        """Check if the mark counts towards the attendance rate."""
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class AttendanceMark(BaseModel):
    """Request to record one student's attendance for a day."""

    student_id: str = Field(min_length=1, max_length=50)
    attendance_date: date
    status: AttendanceStatus

    @field_validator("student_id")
    @classmethod
    def strip_student_id(cls, value: str) -> str:
        """Trim surrounding whitespace from the identifier."""
        value = value.strip()
        if not value:
            raise ValueError("student_id must not be blank")
        return value


class AttendanceEntry(BaseModel):
    """Stored attendance mark joined with the student's name."""

    model_config = ConfigDict(frozen=True)

    attendance_id: int
    student_id: str
    first_name: str
    last_name: str
    attendance_date: date
    status: AttendanceStatus


class AttendanceStats(BaseModel):
    """Attendance rate over every mark in a CDC.

    Attributes:
        total_records: Number of marks.
        present_records: Present and late marks.
        attendance_rate: Rounded percentage, 0 when there are no marks.
    """

    model_config = ConfigDict(frozen=True)

    total_records: int = Field(ge=0)
    present_records: int = Field(ge=0)
    attendance_rate: int = Field(ge=0, le=100)


class DailyAttendance(BaseModel):
    """Attendance totals for one day of a weekly summary.

    Attributes:
        day: Calendar day.
        present: Present and late marks.
        absent: Absent marks.
        excused: Excused marks.
        total: Students marked that day, or the CDC's enrollment when
            nobody was marked.
        percentage: Rounded present percentage. None on an unmarked
            weekend day, 0 on an unmarked weekday.
        is_weekend: Saturday or Sunday.
    """

    model_config = ConfigDict(frozen=True)

    day: date
    present: int = 0
    absent: int = 0
    excused: int = 0
    total: int = 0
    percentage: int | None = None
    is_weekend: bool = False
