# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Activity service for take-home activities.

This module provides the ActivityService class for:
- Creating activities in the caller's CDC
- Listing a CDC's activities with their age ranges
- Replacing and deleting activities of the caller's CDC

Parents see activities through ContentService.child_activities().
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
    Deny,
    DenyReason,
    Operation,
    TenantScope,
)
from src.domains.access.service import AccessService
from src.infrastructure.database.models.content import AgeGroup, TakeHomeActivity
from src.models.homework import ActivityRequest, ActivitySummary
from src.models.person import Identity

logger = logging.getLogger(__name__)


class ActivityServiceError(Exception):
    """Base exception for activity service errors."""

    pass


class ActivityNotFoundError(ActivityServiceError):
    """Raised when an activity is not found."""

    pass


class UnknownAgeGroupError(ActivityServiceError):
    """Raised when an activity names an age group missing from the catalog."""

    pass


async def require_activity(
    access: AccessService,
    actor: Actor,
    operation: Operation,
    activity_id: int,
) -> AccessTarget:
    """Authorize an operation on a stored activity.

    Activities owned by no CDC are treated as another CDC's.

    Returns:
        The activity's target, with its owning CDC.

    Raises:
        ActivityNotFoundError: If the activity does not exist.
        AccessDeniedError: If the operation is refused.
    """
    target = await access.target_for_activity(activity_id)
    if target is None:
        raise ActivityNotFoundError(f"Activity {activity_id} not found")
    if target.tenant_id is None:
        raise AccessDeniedError(Deny(DenyReason.CROSS_TENANT))
    access.require(actor, operation, target)
    return target


class ActivityService:
    """Service for a CDC's take-home activities.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize activity service.

        Args:
            db: Async database session.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        self._settings = settings or get_settings()
        self._access = AccessService(db)

    async def create_activity(self, identity: Identity, request: ActivityRequest) -> ActivitySummary:
        """Create an activity in the caller's CDC.

        Args:
            identity: Caller identity.
            request: Activity details.

        Returns:
            The created activity.

        Raises:
            AccessDeniedError: If the caller may not manage activities.
            UnknownAgeGroupError: If the age group is not in the catalog.
            ActivityServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        tenant_id = self._tenant_of(self._access.require(actor, Operation.MANAGE_ACTIVITIES))

        age_range = await self._age_range(request.age_group_id)

        activity = TakeHomeActivity(
            title=request.title,
            description=request.description,
            due_date=request.due_date,
            file_path=request.file_path,
            cdc_id=tenant_id,
            age_group_id=request.age_group_id,
            created_by=actor.user_id,
        )

        try:
            self.db.add(activity)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Activity create failed in CDC %s: %s", tenant_id, str(e))
            raise ActivityServiceError("Failed to create activity") from e

        await self.db.refresh(activity)

        logger.info("Activity created: %s (cdc=%s)", activity.activity_id, tenant_id)

        return self._to_summary(activity, age_range)

    async def list_activities(self, identity: Identity) -> list[ActivitySummary]:
        """List the caller's CDC activities, newest first.

        Raises:
            AccessDeniedError: If the caller may not read activities.
        """
        actor = await self._access.resolve_actor(identity)
        tenant_id = self._tenant_of(self._access.require(actor, Operation.READ_ACTIVITIES))

        result = await self.db.execute(
            select(TakeHomeActivity, AgeGroup.age_range)
            .outerjoin(AgeGroup, AgeGroup.age_group_id == TakeHomeActivity.age_group_id)
            .where(TakeHomeActivity.cdc_id == tenant_id)
            .order_by(TakeHomeActivity.creation_date.desc())
        )
        return [self._to_summary(activity, age_range) for activity, age_range in result.all()]

    async def update_activity(
        self,
        identity: Identity,
        activity_id: int,
        request: ActivityRequest,
    ) -> ActivitySummary:
        """Replace an activity's details.

        A request without a file keeps the stored file.

        Raises:
            AccessDeniedError: If the activity belongs to another CDC.
            ActivityNotFoundError: If the activity does not exist.
            UnknownAgeGroupError: If the age group is not in the catalog.
            ActivityServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.MANAGE_ACTIVITIES)
        target = await require_activity(self._access, actor, Operation.MANAGE_ACTIVITIES, activity_id)

        activity = await self._load(activity_id, target.tenant_id)
        age_range = await self._age_range(request.age_group_id)

        try:
            activity.title = request.title
            activity.description = request.description
            activity.due_date = request.due_date
            activity.age_group_id = request.age_group_id
            if request.file_path is not None:
                activity.file_path = request.file_path
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Activity update failed for %s: %s", activity_id, str(e))
            raise ActivityServiceError("Failed to update activity") from e

        logger.info("Activity updated: %s (cdc=%s)", activity_id, target.tenant_id)

        return self._to_summary(activity, age_range)

    async def delete_activity(self, identity: Identity, activity_id: int) -> None:
        """Delete an activity and its submissions.

        Raises:
            AccessDeniedError: If the activity belongs to another CDC.
            ActivityNotFoundError: If the activity does not exist.
            ActivityServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.MANAGE_ACTIVITIES)
        target = await require_activity(self._access, actor, Operation.MANAGE_ACTIVITIES, activity_id)

        activity = await self._load(activity_id, target.tenant_id)

        try:
            await self.db.delete(activity)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Activity delete failed for %s: %s", activity_id, str(e))
            raise ActivityServiceError("Failed to delete activity") from e

        logger.info("Activity deleted: %s (cdc=%s)", activity_id, target.tenant_id)

    async def _load(self, activity_id: int, tenant_id: int | None) -> TakeHomeActivity:
        result = await self.db.execute(
            select(TakeHomeActivity).where(
                TakeHomeActivity.activity_id == activity_id,
                TakeHomeActivity.cdc_id == tenant_id,
            )
        )
        activity = result.scalar_one_or_none()
        if activity is None:
            raise ActivityNotFoundError(f"Activity {activity_id} not found")
        return activity

    async def _age_range(self, age_group_id: int | None) -> str | None:
        if age_group_id is None:
            return None
        result = await self.db.execute(
            select(AgeGroup).where(AgeGroup.age_group_id == age_group_id)
        )
        group = result.scalar_one_or_none()
        if group is None:
            raise UnknownAgeGroupError(f"Age group {age_group_id} not found")
        return group.age_range

    def _tenant_of(self, scope: object) -> int:
        if not isinstance(scope, TenantScope):
            raise AccessDeniedError(Deny(DenyReason.MISSING_TENANT))
        return scope.tenant_id

    def _to_summary(self, activity: TakeHomeActivity, age_range: str | None) -> ActivitySummary:
        return ActivitySummary(
            activity_id=activity.activity_id,
            title=activity.title,
            description=activity.description,
            due_date=activity.due_date,
            age_group_id=activity.age_group_id,
            age_range=age_range,
            file_path=activity.file_path,
            tenant_id=activity.cdc_id,
            created_at=activity.creation_date,
        )
