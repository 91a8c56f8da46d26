# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance service for daily marks and summaries.

This module provides the AttendanceService class for:
- Recording one student's mark for a day
- Recording a whole class in one transaction
- Listing a CDC's marks
- Computing the CDC attendance rate
- Summarizing the week around a reference date

A student has at most one mark per day; recording again replaces it.
"""

import logging
from collections import Counter
from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings, get_settings
from src.domains.access.scope import (
    AccessDeniedError,
    Deny,
    DenyReason,
    Operation,
    TenantScope,
)
from src.domains.access.service import AccessService
from src.infrastructure.database.models.attendance import Attendance
from src.infrastructure.database.models.student import Student
from src.models.attendance import (
    AttendanceEntry,
    AttendanceMark,
    AttendanceStats,
    AttendanceStatus,
    DailyAttendance,
)
from src.models.person import Identity
from src.utils.datetime import today_in

logger = logging.getLogger(__name__)

# Days either side of the reference date in a weekly summary
WEEK_RADIUS = 3


class AttendanceServiceError(Exception):
    """Base exception for attendance service errors."""

    pass


class StudentNotFoundError(AttendanceServiceError):
    """Raised when a marked student is not found in the caller's CDC."""

    pass


def percent(part: int, whole: int) -> int:
    """Percentage rounded half up. Zero when whole is zero."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (whole * 2)


class AttendanceService:
    """Service for attendance marks.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize attendance service.

        Args:
            db: Async database session.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        self._settings = settings or get_settings()
        self._access = AccessService(db)

    async def record_attendance(self, identity: Identity, mark: AttendanceMark) -> bool:
        """Record or replace a student's mark for a day.

        Args:
            identity: Caller identity.
            mark: Student, day and status.

        Returns:
            True if a mark was created, False if an existing one was replaced.

        Raises:
            AccessDeniedError: If the caller may not record attendance for
                the student.
            StudentNotFoundError: If the student does not exist.
            AttendanceServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.RECORD_ATTENDANCE)

        target = await self._access.target_for_student(mark.student_id)
        if target is None:
            raise StudentNotFoundError(f"Student {mark.student_id} not found")
        self._access.require(actor, Operation.RECORD_ATTENDANCE, target)

        result = await self.db.execute(
            select(Attendance).where(
                Attendance.student_id == mark.student_id,
                Attendance.attendance_date == mark.attendance_date,
            )
        )
        existing = result.scalar_one_or_none()

        try:
            if existing is None:
                self.db.add(
                    Attendance(
                        student_id=mark.student_id,
                        attendance_date=mark.attendance_date,
                        status=mark.status.value,
                        recorded_by=actor.user_id,
                    )
                )
            else:
                existing.status = mark.status.value
                existing.recorded_by = actor.user_id
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Attendance write failed for %s: %s", mark.student_id, str(e))
            raise AttendanceServiceError("Failed to record attendance") from e

        logger.info(
            "Attendance %s: %s on %s is %s",
            "recorded" if existing is None else "updated",
            mark.student_id,
            mark.attendance_date,
            mark.status.value,
        )
        return existing is None

    async def record_bulk(self, identity: Identity, marks: list[AttendanceMark]) -> int:
        """Record marks for several students at once.

        Every student must belong to the caller's CDC, or nothing is
        written. Later marks for the same student and day win.

        Args:
            identity: Caller identity.
            marks: Marks to record.

        Returns:
            Number of distinct student-day marks written.

        Raises:
            AccessDeniedError: If the caller may not record attendance.
            StudentNotFoundError: If any student is missing from the CDC.
            AttendanceServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        tenant_id = self._tenant_of(self._access.require(actor, Operation.RECORD_ATTENDANCE))

        latest = {(m.student_id, m.attendance_date): m.status for m in marks}
        if not latest:
            return 0

        student_ids = {student_id for student_id, _ in latest}
        result = await self.db.execute(
            select(Student.student_id).where(
                Student.student_id.in_(sorted(student_ids)),
                Student.cdc_id == tenant_id,
            )
        )
        missing = student_ids - set(result.scalars().all())
        if missing:
            raise StudentNotFoundError(f"Students not found: {', '.join(sorted(missing))}")

        result = await self.db.execute(
            select(Attendance).where(
                Attendance.student_id.in_(sorted(student_ids)),
                Attendance.attendance_date.in_(sorted({day for _, day in latest})),
            )
        )
        existing = {(row.student_id, row.attendance_date): row for row in result.scalars().all()}

        try:
            for key, status in latest.items():
                row = existing.get(key)
                if row is None:
                    self.db.add(
                        Attendance(
                            student_id=key[0],
                            attendance_date=key[1],
                            status=status.value,
                            recorded_by=actor.user_id,
                        )
                    )
                else:
                    row.status = status.value
                    row.recorded_by = actor.user_id
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Bulk attendance write failed in CDC %s: %s", tenant_id, str(e))
            raise AttendanceServiceError("Failed to record attendance") from e

        logger.info("Attendance recorded for %d marks in CDC %s", len(latest), tenant_id)
        return len(latest)

    async def list_attendance(
        self,
        identity: Identity,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceEntry]:
        """List the marks of the caller's CDC, newest day first.

        Args:
            identity: Caller identity.
            start: First day to include.
            end: Last day to include.

        Raises:
            AccessDeniedError: If the caller may not read attendance.
        """
        actor = await self._access.resolve_actor(identity)
        tenant_id = self._tenant_of(self._access.require(actor, Operation.READ_ATTENDANCE))

        query = (
            select(Attendance, Student.first_name, Student.last_name)
            .join(Student, Student.student_id == Attendance.student_id)
            .where(Student.cdc_id == tenant_id)
        )
        if start is not None:
            query = query.where(Attendance.attendance_date >= start)
        if end is not None:
            query = query.where(Attendance.attendance_date <= end)

        result = await self.db.execute(
            query.order_by(Attendance.attendance_date.desc(), Student.last_name, Student.first_name)
        )

        entries = []
        for attendance, first_name, last_name in result.all():
            status = self._status_of(attendance.status)
            if status is None:
                continue
            entries.append(
                AttendanceEntry(
                    attendance_id=attendance.attendance_id,
                    student_id=attendance.student_id,
                    first_name=first_name,
                    last_name=last_name,
                    attendance_date=attendance.attendance_date,
                    status=status,
                )
            )
        return entries

    async def attendance_stats(self, identity: Identity) -> AttendanceStats:
        """Compute the attendance rate over every mark of the caller's CDC.

        Raises:
            AccessDeniedError: If the caller may not read attendance.
        """
        actor = await self._access.resolve_actor(identity)
        tenant_id = self._tenant_of(self._access.require(actor, Operation.READ_ATTENDANCE))

        result = await self.db.execute(
            select(Attendance.status, func.count(Attendance.attendance_id))
            .join(Student, Student.student_id == Attendance.student_id)
            .where(Student.cdc_id == tenant_id)
            .group_by(Attendance.status)
        )

        total = present = 0
        for raw_status, count in result.all():
            status = self._status_of(raw_status)
            if status is None:
                continue
            total += count
            if status.counts_present:
                present += count

        return AttendanceStats(
            total_records=total,
            present_records=present,
            attendance_rate=percent(present, total),
        )

    async def weekly_summary(
        self,
        identity: Identity,
        as_of: date | None = None,
    ) -> list[DailyAttendance]:
        """Summarize the seven days centred on a reference date.

        Args:
            identity: Caller identity.
            as_of: Centre day. Defaults to today in the configured timezone.

        Returns:
            One entry per day, oldest first.

        Raises:
            AccessDeniedError: If the caller may not read attendance.
        """
        ref = as_of or today_in(self._settings.timezone)
        actor = await self._access.resolve_actor(identity)
        tenant_id = self._tenant_of(self._access.require(actor, Operation.READ_ATTENDANCE))

        start = ref - timedelta(days=WEEK_RADIUS)
        end = ref + timedelta(days=WEEK_RADIUS)

        result = await self.db.execute(
            select(func.count(Student.student_id)).where(Student.cdc_id == tenant_id)
        )
        enrolled = result.scalar() or 0

        result = await self.db.execute(
            select(
                Attendance.attendance_date,
                Attendance.status,
                func.count(Attendance.attendance_id),
            )
            .join(Student, Student.student_id == Attendance.student_id)
            .where(
                Student.cdc_id == tenant_id,
                Attendance.attendance_date >= start,
                Attendance.attendance_date <= end,
            )
            .group_by(Attendance.attendance_date, Attendance.status)
        )

        counts: dict[date, Counter[AttendanceStatus]] = {}
        for day, raw_status, count in result.all():
            status = self._status_of(raw_status)
            if status is not None:
                counts.setdefault(day, Counter())[status] += count

        days = []
        for offset in range(-WEEK_RADIUS, WEEK_RADIUS + 1):
            day = ref + timedelta(days=offset)
            tally = counts.get(day, Counter())
            marked = sum(tally.values())
            present = tally[AttendanceStatus.PRESENT] + tally[AttendanceStatus.LATE]
            is_weekend = day.weekday() >= 5

            if marked:
                percentage = percent(present, marked)
            else:
                percentage = None if is_weekend else 0

            days.append(
                DailyAttendance(
                    day=day,
                    present=present,
                    absent=tally[AttendanceStatus.ABSENT],
                    excused=tally[AttendanceStatus.EXCUSED],
                    total=marked or enrolled,
                    percentage=percentage,
                    is_weekend=is_weekend,
                )
            )
        return days

    def _tenant_of(self, scope: object) -> int:
        if not isinstance(scope, TenantScope):
            raise AccessDeniedError(Deny(DenyReason.MISSING_TENANT))
        return scope.tenant_id

    def _status_of(self, value: str | None) -> AttendanceStatus | None:
        try:
            return AttendanceStatus(value)
        except ValueError:
            logger.warning("Skipping attendance mark with unknown status %r", value)
            return None
