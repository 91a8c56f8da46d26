# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for enrollment and age-annotated listings.

This module provides the StudentService class for:
- Enrolling a child with guardian and parent details
- Listing a CDC's children, optionally by canonical age band
- Linking a guardian record to a parent account
- Looking up a parent's linked child
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings, get_settings
from src.domains.access.scope import (
    AccessDeniedError,
    AccessTarget,
    ChildScope,
    Deny,
    DenyReason,
    Operation,
    TenantScope,
)
from src.domains.access.service import AccessService
from src.domains.age.bands import birthdate_window, canonical_band_for
from src.domains.age.clock import InvalidAgeError, compute_age
from src.infrastructure.database.models.student import (
    ChildOtherInfo,
    FatherInfo,
    GuardianInfo,
    MotherInfo,
    Student,
)
from src.infrastructure.database.models.user import User
from src.models.common import ALL_AGES, Role
from src.models.person import Identity
from src.models.student import StudentEnrollRequest, StudentSummary
from src.utils.datetime import today_in

logger = logging.getLogger(__name__)


class StudentServiceError(Exception):
    """Base exception for student service errors."""

    pass


class StudentNotFoundError(StudentServiceError):
    """Raised when a student is not found."""

    pass


class StudentExistsError(StudentServiceError):
    """Raised when a student id is already taken."""

    pass


class ParentNotFoundError(StudentServiceError):
    """Raised when a parent account is not found."""

    pass


class ParentAlreadyLinkedError(StudentServiceError):
    """Raised when a parent account is already linked to a child."""

    pass


class StudentService:
    """Service for enrolled children.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize student service.

        Args:
            db: Async database session.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        self._settings = settings or get_settings()
        self._access = AccessService(db)

    async def enroll_student(
        self,
        identity: Identity,
        request: StudentEnrollRequest,
        as_of: date | None = None,
    ) -> StudentSummary:
        """Enroll a child in the caller's CDC.

        The student row and its four profile rows are written in one
        transaction.

        Args:
            identity: Caller identity.
            request: Child, guardian and parent details.
            as_of: Reference date for the returned age.

        Returns:
            Summary of the enrolled child.

        Raises:
            AccessDeniedError: If the caller may not manage students.
            InvalidAgeError: If the birthdate is after the reference date.
            StudentExistsError: If the student id is taken.
            StudentServiceError: If the write fails. Nothing is persisted.
        """
        ref = as_of or today_in(self._settings.timezone)
        actor = await self._access.resolve_actor(identity)
        scope = self._access.require(actor, Operation.MANAGE_STUDENTS)
        if not isinstance(scope, TenantScope):
            raise AccessDeniedError(Deny(DenyReason.MISSING_TENANT))

        # Reject before writing anything
        compute_age(request.birthdate, ref)

        existing = await self.db.execute(
            select(Student.student_id).where(Student.student_id == request.student_id)
        )
        if existing.scalar_one_or_none() is not None:
            raise StudentExistsError(f"Student {request.student_id} already exists")

        student = Student(
            student_id=request.student_id,
            first_name=request.first_name,
            middle_name=request.middle_name,
            last_name=request.last_name,
            birthdate=request.birthdate,
            gender=request.gender,
            cdc_id=scope.tenant_id,
        )

        try:
            self.db.add(student)
            await self.db.flush()

            self.db.add_all([
                ChildOtherInfo(
                    student_id=student.student_id,
                    child_address=request.child.address,
                    first_language=request.child.first_language,
                    second_language=request.child.second_language,
                ),
                GuardianInfo(
                    student_id=student.student_id,
                    guardian_name=request.guardian.name,
                    relationship=request.guardian.relationship,
                    email_address=request.guardian.email_address,
                    phone_num=request.guardian.phone_number,
                ),
                MotherInfo(
                    student_id=student.student_id,
                    mother_name=request.mother.name,
                    mother_occupation=request.mother.occupation,
                    mother_address=request.mother.address,
                    mother_home_contact=request.mother.home_contact,
                    mother_work_contact=request.mother.work_contact,
                ),
                FatherInfo(
                    student_id=student.student_id,
                    father_name=request.father.name,
                    father_occupation=request.father.occupation,
                    father_address=request.father.address,
                    father_home_contact=request.father.home_contact,
                    father_work_contact=request.father.work_contact,
                ),
            ])
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Enrollment of %s failed: %s", request.student_id, str(e))
            raise StudentServiceError(f"Failed to enroll student {request.student_id}") from e

        logger.info("Student enrolled: %s (cdc=%s)", student.student_id, scope.tenant_id)

        return self._to_summary(student, ref)

    async def list_students(
        self,
        identity: Identity,
        age_filter: str = ALL_AGES,
        as_of: date | None = None,
    ) -> list[StudentSummary]:
        """List the caller's CDC children with their ages.

        Args:
            identity: Caller identity.
            age_filter: ``all`` or a canonical band label.
            as_of: Reference date for ages and bands.

        Returns:
            Children ordered by last name, then first name.

        Raises:
            AccessDeniedError: If the caller may not read students.
            UnknownAgeBandError: If age_filter is not ``all`` or canonical.
        """
        ref = as_of or today_in(self._settings.timezone)
        actor = await self._access.resolve_actor(identity)
        scope = self._access.require(actor, Operation.READ_STUDENTS)
        if not isinstance(scope, TenantScope):
            raise AccessDeniedError(Deny(DenyReason.MISSING_TENANT))

        query = select(Student).where(Student.cdc_id == scope.tenant_id)
        if age_filter != ALL_AGES:
            window = birthdate_window(age_filter, ref)
            query = query.where(Student.birthdate > window.after, Student.birthdate <= window.until)

        result = await self.db.execute(query.order_by(Student.last_name, Student.first_name))

        summaries = []
        for student in result.scalars().all():
            try:
                summaries.append(self._to_summary(student, ref))
            except InvalidAgeError as e:
                logger.warning("Skipping student %s: %s", student.student_id, e)
        return summaries

    async def link_parent(self, identity: Identity, student_id: str, parent_user_id: int) -> None:
        """Link a child's guardian record to a parent account.

        A parent account is linked to at most one child. Both the child and
        the parent account must belong to the caller's CDC; a parent account
        not yet bound to any CDC may be linked.

        Raises:
            AccessDeniedError: If the caller may not manage this child or
                the parent account belongs to another CDC.
            StudentNotFoundError: If the child has no guardian record.
            ParentNotFoundError: If the account is missing or not a parent.
            ParentAlreadyLinkedError: If the parent is linked to a child.
            StudentServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.MANAGE_STUDENTS)

        target = await self._access.target_for_student(student_id)
        if target is None:
            raise StudentNotFoundError(f"Student {student_id} not found")
        self._access.require(actor, Operation.MANAGE_STUDENTS, target)

        result = await self.db.execute(select(User).where(User.id == parent_user_id))
        parent = result.scalar_one_or_none()
        if parent is None or Role.parse(parent.type) != Role.PARENT:
            raise ParentNotFoundError(f"Parent {parent_user_id} not found")
        self._access.require(actor, Operation.MANAGE_STUDENTS, AccessTarget(tenant_id=parent.cdc_id))

        result = await self.db.execute(
            select(GuardianInfo.student_id).where(GuardianInfo.user_id == parent_user_id)
        )
        linked = result.scalars().first()
        if linked is not None:
            raise ParentAlreadyLinkedError(f"Parent {parent_user_id} is already linked to {linked}")

        result = await self.db.execute(
            select(GuardianInfo).where(GuardianInfo.student_id == student_id)
        )
        guardian = result.scalars().first()
        if guardian is None:
            raise StudentNotFoundError(f"Student {student_id} has no guardian record")

        try:
            guardian.user_id = parent_user_id
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Linking parent %s to %s failed: %s", parent_user_id, student_id, str(e))
            raise StudentServiceError(f"Failed to link parent {parent_user_id}") from e

        logger.info("Guardian of %s linked to parent %s", student_id, parent_user_id)

    async def linked_child(self, identity: Identity, as_of: date | None = None) -> StudentSummary:
        """Get a parent's linked child.

        Raises:
            AccessDeniedError: If the caller is not a parent with an
                active linked child.
        """
        ref = as_of or today_in(self._settings.timezone)
        actor = await self._access.resolve_actor(identity)
        scope = self._access.require(actor, Operation.VIEW_CHILD)
        if not isinstance(scope, ChildScope):
            raise AccessDeniedError(Deny(DenyReason.NO_LINKED_STUDENT))

        result = await self.db.execute(select(Student).where(Student.student_id == scope.student_id))
        student = result.scalar_one_or_none()
        if student is None:
            raise AccessDeniedError(Deny(DenyReason.NO_LINKED_STUDENT))

        return self._to_summary(student, ref)

    def _to_summary(self, student: Student, as_of: date) -> StudentSummary:
        age = compute_age(student.birthdate, as_of)
        return StudentSummary(
            student_id=student.student_id,
            first_name=student.first_name,
            middle_name=student.middle_name,
            last_name=student.last_name,
            birthdate=student.birthdate,
            gender=student.gender,
            tenant_id=student.cdc_id,
            age_years=age.years,
            age_months=age.months,
            total_months=age.total_months,
            decimal_age=age.decimal_years,
            age_band=canonical_band_for(student.birthdate, as_of),
        )
