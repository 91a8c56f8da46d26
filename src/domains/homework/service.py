# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Homework service for uploads and activity submissions.

This module provides the HomeworkService class for:
- Uploading homework for a parent's linked child
- Submitting a parent's answer to a take-home activity
- Listing a child's homework and submissions
- Listing an activity's submissions and roster for CDC workers
- Deleting submissions

Parents act on their linked child only; workers act within their CDC.
The child's CDC and the activity's CDC are always read from storage.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings, get_settings
from src.domains.access.scope import (
    AccessDeniedError,
    AccessTarget,
    Actor,
    ChildScope,
    Deny,
    DenyReason,
    Operation,
)
from src.domains.access.service import AccessService
from src.domains.activity.service import require_activity
from src.infrastructure.database.models.homework import ActivitySubmission, Homework
from src.infrastructure.database.models.student import Student
from src.models.common import Role
from src.models.homework import (
    HomeworkRequest,
    HomeworkSummary,
    RosterEntry,
    SubmissionRequest,
    SubmissionSummary,
)
from src.models.person import Identity

logger = logging.getLogger(__name__)


class HomeworkServiceError(Exception):
    """Base exception for homework service errors."""

    pass


class StudentNotFoundError(HomeworkServiceError):
    """Raised when a student is not found."""

    pass


class SubmissionNotFoundError(HomeworkServiceError):
    """Raised when a submission is not found."""

    pass


class SubmissionExistsError(HomeworkServiceError):
    """Raised when a child already answered an activity."""

    pass


class HomeworkService:
    """Service for homework and activity submissions.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize homework service.

        Args:
            db: Async database session.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        self._settings = settings or get_settings()
        self._access = AccessService(db)

    async def upload_homework(self, identity: Identity, request: HomeworkRequest) -> HomeworkSummary:
        """Upload homework for the caller's linked child.

        Args:
            identity: Caller identity.
            request: Homework title, description and stored file.

        Returns:
            The stored upload.

        Raises:
            AccessDeniedError: If the caller is not a parent with an active
                linked child.
            HomeworkServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        scope = self._child_scope(actor)

        homework = Homework(
            student_id=scope.student_id,
            cdc_id=scope.tenant_id,
            title=request.title,
            description=request.description,
            file_path=request.file_path,
            submitted_by=actor.user_id,
        )

        try:
            self.db.add(homework)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Homework upload failed for %s: %s", scope.student_id, str(e))
            raise HomeworkServiceError("Failed to upload homework") from e

        await self.db.refresh(homework)

        logger.info("Homework uploaded: %s (student=%s)", homework.homework_id, scope.student_id)

        return self._to_homework(homework)

    async def student_homework(self, identity: Identity, student_id: str) -> list[HomeworkSummary]:
        """List a child's homework uploads, newest first.

        Parents may list their linked child's; workers any child of their CDC.

        Raises:
            AccessDeniedError: If the caller may not see the child's work.
            StudentNotFoundError: If an authorized caller names a missing child.
        """
        actor = await self._access.resolve_actor(identity)
        await self._require_child_read(actor, student_id)

        result = await self.db.execute(
            select(Homework)
            .where(Homework.student_id == student_id)
            .order_by(Homework.upload_date.desc())
        )
        return [self._to_homework(row) for row in result.scalars().all()]

    async def submit_activity(self, identity: Identity, request: SubmissionRequest) -> SubmissionSummary:
        """Submit the caller's linked child's answer to an activity.

        The activity must belong to the child's CDC. A child answers each
        activity once; delete the submission to answer again.

        Raises:
            AccessDeniedError: If the caller is not a parent with an active
                linked child, or the activity belongs to another CDC.
            ActivityNotFoundError: If the activity does not exist.
            SubmissionExistsError: If the child already answered.
            HomeworkServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        scope = self._child_scope(actor)
        await require_activity(self._access, actor, Operation.SUBMIT_HOMEWORK, request.activity_id)

        result = await self.db.execute(
            select(ActivitySubmission.submission_id).where(
                ActivitySubmission.activity_id == request.activity_id,
                ActivitySubmission.student_id == scope.student_id,
            )
        )
        if result.scalar_one_or_none() is not None:
            raise SubmissionExistsError(
                f"Student {scope.student_id} already answered activity {request.activity_id}"
            )

        submission = ActivitySubmission(
            activity_id=request.activity_id,
            student_id=scope.student_id,
            file_path=request.file_path,
            comments=request.comments,
            submitted_by=actor.user_id,
        )

        try:
            self.db.add(submission)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Submission failed for activity %s: %s", request.activity_id, str(e))
            raise HomeworkServiceError("Failed to submit activity") from e

        await self.db.refresh(submission)

        logger.info(
            "Activity %s answered: submission %s (student=%s)",
            request.activity_id,
            submission.submission_id,
            scope.student_id,
        )

        return self._to_submission(submission)

    async def student_submissions(self, identity: Identity, student_id: str) -> list[SubmissionSummary]:
        """List a child's activity submissions, newest first.

        Raises:
            AccessDeniedError: If the caller may not see the child's work.
            StudentNotFoundError: If an authorized caller names a missing child.
        """
        actor = await self._access.resolve_actor(identity)
        await self._require_child_read(actor, student_id)

        result = await self.db.execute(
            select(ActivitySubmission)
            .where(ActivitySubmission.student_id == student_id)
            .order_by(ActivitySubmission.submission_date.desc())
        )
        return [self._to_submission(row) for row in result.scalars().all()]

    async def activity_submissions(self, identity: Identity, activity_id: int) -> list[SubmissionSummary]:
        """List every submission to an activity of the caller's CDC.

        Raises:
            AccessDeniedError: If the caller may not read the activity.
            ActivityNotFoundError: If the activity does not exist.
        """
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.READ_ACTIVITIES)
        await require_activity(self._access, actor, Operation.READ_ACTIVITIES, activity_id)

        result = await self.db.execute(
            select(ActivitySubmission)
            .where(ActivitySubmission.activity_id == activity_id)
            .order_by(ActivitySubmission.submission_date.desc())
        )
        return [self._to_submission(row) for row in result.scalars().all()]

    async def activity_roster(self, identity: Identity, activity_id: int) -> list[RosterEntry]:
        """List the activity's CDC children with their submission, if any.

        Raises:
            AccessDeniedError: If the caller may not read the activity.
            ActivityNotFoundError: If the activity does not exist.
        """
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.READ_ACTIVITIES)
        target = await require_activity(self._access, actor, Operation.READ_ACTIVITIES, activity_id)

        students = await self.db.execute(
            select(Student)
            .where(Student.cdc_id == target.tenant_id)
            .order_by(Student.last_name, Student.first_name)
        )
        submissions = await self.db.execute(
            select(ActivitySubmission).where(ActivitySubmission.activity_id == activity_id)
        )
        by_student = {row.student_id: self._to_submission(row) for row in submissions.scalars().all()}

        return [
            RosterEntry(
                student_id=student.student_id,
                first_name=student.first_name,
                last_name=student.last_name,
                submission=by_student.get(student.student_id),
            )
            for student in students.scalars().all()
        ]

    async def delete_submission(self, identity: Identity, submission_id: int) -> None:
        """Delete a submission.

        Parents delete their linked child's submissions; workers delete
        submissions to their CDC's activities.

        Raises:
            AccessDeniedError: If the caller may not delete it.
            SubmissionNotFoundError: If an authorized caller names a missing one.
            HomeworkServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        operation = Operation.SUBMIT_HOMEWORK if actor.role == Role.PARENT else Operation.MANAGE_ACTIVITIES
        self._access.require(actor, operation)

        result = await self.db.execute(
            select(ActivitySubmission).where(ActivitySubmission.submission_id == submission_id)
        )
        submission = result.scalar_one_or_none()
        if submission is None:
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")

        if actor.role == Role.PARENT:
            target = await self._access.target_for_student(submission.student_id)
            self._access.require(actor, operation, target or AccessTarget(student_id=submission.student_id))
        else:
            await require_activity(self._access, actor, operation, submission.activity_id)

        try:
            await self.db.delete(submission)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Submission delete failed for %s: %s", submission_id, str(e))
            raise HomeworkServiceError("Failed to delete submission") from e

        logger.info("Submission deleted: %s (activity=%s)", submission_id, submission.activity_id)

    def _child_scope(self, actor: Actor) -> ChildScope:
        scope = self._access.require(actor, Operation.SUBMIT_HOMEWORK)
        if not isinstance(scope, ChildScope):
            raise AccessDeniedError(Deny(DenyReason.NO_LINKED_STUDENT))
        return scope

    async def _require_child_read(self, actor: Actor, student_id: str) -> None:
        operation = Operation.VIEW_CHILD_CONTENT if actor.role == Role.PARENT else Operation.READ_ACTIVITIES
        self._access.require(actor, operation)

        target = await self._access.target_for_student(student_id)
        if target is None:
            self._access.require(actor, operation, AccessTarget(student_id=student_id))
            raise StudentNotFoundError(f"Student {student_id} not found")
        self._access.require(actor, operation, target)

    def _to_homework(self, row: Homework) -> HomeworkSummary:
        return HomeworkSummary(
            homework_id=row.homework_id,
            student_id=row.student_id,
            tenant_id=row.cdc_id,
            title=row.title,
            description=row.description,
            file_path=row.file_path,
            uploaded_at=row.upload_date,
        )

    def _to_submission(self, row: ActivitySubmission) -> SubmissionSummary:
        return SubmissionSummary(
            submission_id=row.submission_id,
            activity_id=row.activity_id,
            student_id=row.student_id,
            file_path=row.file_path,
            comments=row.comments,
            submitted_at=row.submission_date,
        )
