# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content service for announcements and take-home activities.

This module provides the ContentService class for:
- Publishing announcements into the caller's CDC
- Publishing one announcement to several CDCs
- Listing a CDC's announcements
- Building the announcement feed of any viewer
- Listing a parent's child activities by catalog age band
- Deleting announcements within the caller's CDC
"""

import logging
from datetime import date

from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings, get_settings
from src.domains.access.scope import (
    AccessDeniedError,
    Actor,
    ChildScope,
    Deny,
    DenyReason,
    GeographyScope,
    Operation,
    TenantScope,
)
from src.domains.access.service import AccessService
from src.domains.age.bands import AgeBandTable
from src.domains.age.clock import age_in_months
from src.domains.content.targeting import ContentTargeting, Viewer
from src.domains.tenant.service import TenantService
from src.infrastructure.database.models.content import AgeGroup, Announcement, TakeHomeActivity
from src.infrastructure.database.models.student import Student
from src.infrastructure.database.models.user import User
from src.models.age import AgeBand
from src.models.common import ContentKind, Role
from src.models.content import (
    AnnouncementCreateRequest,
    ContentItem,
    PublishFailure,
    PublishResult,
    role_filter_to_text,
)
from src.models.person import ChildStanding, Identity
from src.utils.datetime import today_in

logger = logging.getLogger(__name__)


class ContentServiceError(Exception):
    """Base exception for content service errors."""

    pass


class ContentNotFoundError(ContentServiceError):
    """Raised when content is not found."""

    pass


class ContentService:
    """Service for targeted content.

    Every method resolves the caller through AccessService first, so a
    role change, CDC deactivation or guardian unlink takes effect on the
    next call.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize content service.

        Args:
            db: Async database session.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        self._settings = settings or get_settings()
        self._access = AccessService(db)

    async def publish_announcement(
        self,
        identity: Identity,
        request: AnnouncementCreateRequest,
    ) -> ContentItem:
        """Publish an announcement in the caller's CDC.

        Args:
            identity: Caller identity.
            request: Announcement content and targeting.

        Returns:
            The published item.

        Raises:
            AccessDeniedError: If the caller may not publish.
            ContentServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        scope = self._access.require(actor, Operation.PUBLISH_CONTENT)
        tenant_id = self._tenant_of(scope)

        author_name = await self._author_name(actor.user_id)

        announcement = Announcement(
            title=request.title,
            message=request.message,
            author_id=actor.user_id,
            author_name=author_name,
            age_filter=request.age_filter,
            role_filter=role_filter_to_text(request.role_filter),
            cdc_id=tenant_id,
            attachment_path=request.attachment_path,
            attachment_name=request.attachment_name,
        )

        try:
            self.db.add(announcement)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Announcement publish failed in CDC %s: %s", tenant_id, str(e))
            raise ContentServiceError("Failed to publish announcement") from e

        await self.db.refresh(announcement)

        logger.info(
            "Announcement published: %s (cdc=%s, ages=%s, roles=%s)",
            announcement.id,
            tenant_id,
            request.age_filter,
            announcement.role_filter,
        )

        return self._to_item(announcement)

    async def publish_to_tenants(
        self,
        identity: Identity,
        request: AnnouncementCreateRequest,
        tenant_ids: list[int],
    ) -> PublishResult:
        """Publish one announcement to several CDCs.

        Each CDC is authorized on its own stored record. CDCs the caller
        may not publish to, and CDCs that do not exist, are reported as
        failures; the rest are written in one transaction.

        Args:
            identity: Caller identity.
            request: Announcement content and targeting.
            tenant_ids: CDCs to publish to. Duplicates are ignored.

        Returns:
            Created items and per-CDC failures.

        Raises:
            AccessDeniedError: If the caller may not publish at all.
            ContentServiceError: If the write fails.
        """
        actor = await self._access.resolve_actor(identity)
        self._access.require(actor, Operation.PUBLISH_CONTENT)

        author_name = await self._author_name(actor.user_id)

        announcements = []
        failures = []
        for tenant_id in dict.fromkeys(tenant_ids):
            target = await self._access.target_for_tenant(tenant_id)
            if target is None:
                failures.append(PublishFailure(tenant_id=tenant_id, reason="not-found"))
                continue

            decision = self._access.authorize(actor, Operation.PUBLISH_CONTENT, target)
            if isinstance(decision, Deny):
                failures.append(PublishFailure(tenant_id=tenant_id, reason=decision.reason.value))
                continue

            announcements.append(
                Announcement(
                    title=request.title,
                    message=request.message,
                    author_id=actor.user_id,
                    author_name=author_name,
                    age_filter=request.age_filter,
                    role_filter=role_filter_to_text(request.role_filter),
                    cdc_id=tenant_id,
                    attachment_path=request.attachment_path,
                    attachment_name=request.attachment_name,
                )
            )

        if announcements:
            try:
                self.db.add_all(announcements)
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error("Announcement publish failed for %d CDCs: %s", len(announcements), str(e))
                raise ContentServiceError("Failed to publish announcement") from e

            for announcement in announcements:
                await self.db.refresh(announcement)

        logger.info(
            "Announcement published to %d CDCs, %d refused",
            len(announcements),
            len(failures),
        )

        return PublishResult(
            created=[self._to_item(announcement) for announcement in announcements],
            failures=failures,
        )

    async def list_tenant_announcements(self, identity: Identity) -> list[ContentItem]:
        """List the announcements owned by the caller's CDC, newest first.

        Raises:
            AccessDeniedError: If the caller may not read content, or is
                not bound to a CDC.
        """
        actor = await self._access.resolve_actor(identity)
        scope = self._access.require(actor, Operation.READ_CONTENT)
        tenant_id = self._tenant_of(scope)

        result = await self.db.execute(
            select(Announcement)
            .where(Announcement.cdc_id == tenant_id)
            .order_by(Announcement.created_at.desc())
        )
        return self._to_items(result.scalars().all())

    async def feed_for(self, identity: Identity, as_of: date | None = None) -> list[ContentItem]:
        """Build the announcement feed of a viewer.

        Parents see what targets their linked child's CDC and age band.
        Focal persons see what targets CDCs in their municipality and
        province. CDC staff see what targets their CDC. Broadcast items
        reach every CDC but no focal person.

        Args:
            identity: Caller identity.
            as_of: Reference date for the child's age. Defaults to today
                in the configured timezone.

        Returns:
            Visible items, newest first.

        Raises:
            AccessDeniedError: If the caller may not read content.
        """
        ref = as_of or today_in(self._settings.timezone)
        actor = await self._access.resolve_actor(identity)
        viewer = await self._viewer_for(actor, ref)

        query = select(Announcement).order_by(Announcement.created_at.desc())
        if viewer.tenant_id is not None:
            query = query.where(
                or_(Announcement.cdc_id.is_(None), Announcement.cdc_id == viewer.tenant_id)
            )

        result = await self.db.execute(query)
        items = self._to_items(result.scalars().all())

        directory = await TenantService(self.db).load_directory()
        targeting = ContentTargeting(directory, AgeBandTable.canonical())

        return targeting.filter(items, viewer)

    async def child_activities(
        self,
        identity: Identity,
        as_of: date | None = None,
    ) -> list[ContentItem]:
        """List take-home activities for a parent's linked child.

        The child is classified against the stored age group catalog;
        activities of that group in the child's CDC are returned. A child
        outside every catalog band has no activities.

        Args:
            identity: Caller identity.
            as_of: Reference date for the child's age.

        Returns:
            Activities, newest first.

        Raises:
            AccessDeniedError: If the caller is not a parent with an
                active linked child.
        """
        ref = as_of or today_in(self._settings.timezone)
        actor = await self._access.resolve_actor(identity)
        scope = self._access.require(actor, Operation.VIEW_CHILD_CONTENT)
        if not isinstance(scope, ChildScope):
            raise AccessDeniedError(Deny(DenyReason.NO_LINKED_STUDENT))

        standing = await self._child_standing(scope, ref)

        catalog = await self.db.execute(select(AgeGroup).order_by(AgeGroup.age_group_id))
        bands = AgeBandTable(
            (AgeBand(id=row.age_group_id, raw_range=row.age_range or "") for row in catalog.scalars().all()),
            placeholders=self._settings.eligibility.range_placeholders,
        )

        band_id = bands.classify(standing.total_months)
        if band_id is None:
            logger.info(
                "Student %s (%d months) matches no age group",
                standing.student_id,
                standing.total_months,
            )
            return []

        result = await self.db.execute(
            select(TakeHomeActivity)
            .where(
                TakeHomeActivity.cdc_id == standing.tenant_id,
                TakeHomeActivity.age_group_id == band_id,
            )
            .order_by(TakeHomeActivity.creation_date.desc())
        )

        return [
            ContentItem(
                id=activity.activity_id,
                kind=ContentKind.ACTIVITY,
                tenant_id=activity.cdc_id,
                age_filter=activity.age_group_id,
                role_filter=frozenset({Role.PARENT}),
                created_at=activity.creation_date,
                title=activity.title,
                body=activity.description,
                attachment_path=activity.file_path,
            )
            for activity in result.scalars().all()
        ]

    async def delete_content(self, identity: Identity, content_id: int) -> None:
        """Delete an announcement owned by the caller's CDC.

        Broadcast announcements belong to no CDC and cannot be deleted
        here.

        Raises:
            AccessDeniedError: If the caller may not delete it.
            ContentNotFoundError: If an authorized caller names a missing item.
        """
        actor = await self._access.resolve_actor(identity)
        scope = self._access.require(actor, Operation.DELETE_CONTENT)
        tenant_id = self._tenant_of(scope)

        target = await self._access.target_for_content(content_id)
        if target is None:
            raise ContentNotFoundError(f"Content {content_id} not found")
        if target.tenant_id is None:
            raise AccessDeniedError(Deny(DenyReason.CROSS_TENANT))
        self._access.require(actor, Operation.DELETE_CONTENT, target)

        result = await self.db.execute(
            select(Announcement).where(
                Announcement.id == content_id,
                Announcement.cdc_id == tenant_id,
            )
        )
        announcement = result.scalar_one_or_none()
        if announcement is None:
            raise ContentNotFoundError(f"Content {content_id} not found")

        await self.db.delete(announcement)
        await self.db.commit()

        logger.info("Announcement deleted: %s (cdc=%s)", content_id, tenant_id)

    async def _viewer_for(self, actor: Actor, as_of: date) -> Viewer:
        if actor.role == Role.PARENT:
            scope = self._access.require(actor, Operation.VIEW_CHILD_CONTENT)
            if not isinstance(scope, ChildScope):
                raise AccessDeniedError(Deny(DenyReason.NO_LINKED_STUDENT))
            return Viewer.for_parent(await self._child_standing(scope, as_of))

        scope = self._access.require(actor, Operation.READ_CONTENT)
        if isinstance(scope, GeographyScope):
            return Viewer(role=actor.role, geography=actor.geography)
        return Viewer(role=actor.role, tenant_id=self._tenant_of(scope))

    async def _child_standing(self, scope: ChildScope, as_of: date) -> ChildStanding:
        result = await self.db.execute(
            select(Student.birthdate).where(Student.student_id == scope.student_id)
        )
        birthdate = result.scalar_one_or_none()
        if birthdate is None:
            raise AccessDeniedError(Deny(DenyReason.NO_LINKED_STUDENT))

        return ChildStanding(
            student_id=scope.student_id,
            tenant_id=scope.tenant_id,
            total_months=age_in_months(birthdate, as_of),
        )

    async def _author_name(self, user_id: int) -> str | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            return None
        if user.other_info is not None and user.other_info.full_name:
            return user.other_info.full_name
        return user.username

    def _tenant_of(self, scope: object) -> int:
        if not isinstance(scope, TenantScope):
            raise AccessDeniedError(Deny(DenyReason.MISSING_TENANT))
        return scope.tenant_id

    def _to_items(self, rows: list[Announcement]) -> list[ContentItem]:
        items = []
        for row in rows:
            try:
                items.append(self._to_item(row))
            except ValidationError as e:
                logger.warning("Skipping announcement %s: %s", row.id, e.errors()[0]["msg"])
        return items

    def _to_item(self, announcement: Announcement) -> ContentItem:
        return ContentItem(
            id=announcement.id,
            kind=ContentKind.ANNOUNCEMENT,
            tenant_id=announcement.cdc_id,
            age_filter=announcement.age_filter,
            role_filter=announcement.role_filter,
            created_at=announcement.created_at,
            title=announcement.title,
            body=announcement.message,
            attachment_path=announcement.attachment_path,
        )
