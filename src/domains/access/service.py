# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Actor and target resolution for authorization.

Tokens are trusted for who the caller is, never for what they may do.
Every scoped operation re-reads the caller's role, CDC status, guardian
linkage and address, and re-derives the target's CDC from the stored
record, before asking authorize() for a decision.

Example:
    access = AccessService(session)
    actor = await access.resolve_actor(identity)
    scope = access.require(actor, Operation.READ_STUDENTS)
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.access.scope import (
    AccessDecision,
    AccessDeniedError,
    AccessTarget,
    Actor,
    Deny,
    Operation,
    Scope,
    authorize,
)
from src.domains.tenant.directory import IncompleteAddressError, parse_address
from src.domains.tenant.service import tenant_from_row
from src.infrastructure.database.models.content import Announcement, TakeHomeActivity
from src.infrastructure.database.models.student import GuardianInfo, Student
from src.infrastructure.database.models.tenant import Cdc
from src.infrastructure.database.models.user import User
from src.models.common import GEOGRAPHY_SCOPED_ROLES, Role, TenantStatus
from src.models.person import Geography, Identity
from src.utils.logging import get_logger, log_context

logger = get_logger(__name__)


class AccessService:
    """Resolves actors and targets against the data store.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize access service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def resolve_actor(self, identity: Identity) -> Actor:
        """Re-resolve a caller for one operation.

        A deleted account resolves to an unassigned actor, which every
        operation denies. A stored role that differs from the token role
        wins.

        Args:
            identity: Verified caller identity.

        Returns:
            Actor with current role, CDC status, linkage and geography.
        """
        result = await self.db.execute(select(User).where(User.id == identity.user_id))
        user = result.scalar_one_or_none()

        if user is None:
            logger.warning("actor_not_found", user_id=identity.user_id)
            return Actor(user_id=identity.user_id, role=Role.UNASSIGNED)

        role = Role.parse(user.type)
        if role != identity.role:
            logger.warning(
                "actor_role_changed",
                user_id=user.id,
                token_role=identity.role.value,
                stored_role=role.value,
            )

        with log_context(user_id=user.id, role=role.value):
            tenant_status = None
            if user.cdc_id is not None:
                tenant_status = await self._tenant_status(user.cdc_id)

            linked_student_id = None
            linked_tenant_id = None
            linked_tenant_status = None
            if role == Role.PARENT:
                linked_student_id = await self._linked_student_id(user.id)
                if linked_student_id is not None:
                    linked_tenant_id = await self._student_tenant_id(linked_student_id)
                if linked_tenant_id is not None:
                    linked_tenant_status = await self._tenant_status(linked_tenant_id)

            geography = None
            if role in GEOGRAPHY_SCOPED_ROLES or role == Role.MSW:
                geography = self._address_geography(user)

            return Actor(
                user_id=user.id,
                role=role,
                tenant_id=user.cdc_id,
                tenant_status=tenant_status,
                linked_student_id=linked_student_id,
                linked_student_tenant_id=linked_tenant_id,
                linked_student_tenant_status=linked_tenant_status,
                geography=geography,
            )

    async def target_for_student(self, student_id: str) -> AccessTarget | None:
        """Re-derive the target of an operation on a child.

        Returns:
            The target, or None if the child does not exist.
        """
        tenant_id = await self._student_tenant_id(student_id)
        if tenant_id is None:
            return None

        target = await self.target_for_tenant(tenant_id)
        if target is None:
            return AccessTarget(tenant_id=tenant_id, student_id=student_id)
        return AccessTarget(
            tenant_id=target.tenant_id,
            tenant_status=target.tenant_status,
            student_id=student_id,
            location=target.location,
        )

    async def target_for_tenant(self, tenant_id: int) -> AccessTarget | None:
        """Re-derive the target of an operation on a CDC.

        Returns:
            The target, or None if the CDC does not exist.
        """
        result = await self.db.execute(select(Cdc).where(Cdc.cdc_id == tenant_id))
        cdc = result.scalar_one_or_none()
        if cdc is None:
            return None

        tenant = tenant_from_row(cdc)
        return AccessTarget(
            tenant_id=tenant.id,
            tenant_status=tenant.status,
            location=tenant.location,
        )

    async def target_for_content(self, content_id: int) -> AccessTarget | None:
        """Re-derive the target of an operation on an announcement.

        Broadcast announcements yield a target with no CDC.

        Returns:
            The target, or None if the announcement does not exist.
        """
        result = await self.db.execute(
            select(Announcement.cdc_id).where(Announcement.id == content_id)
        )
        row = result.one_or_none()
        if row is None:
            return None

        return await self._owner_target(row[0])

    async def target_for_activity(self, activity_id: int) -> AccessTarget | None:
        """Re-derive the target of an operation on a take-home activity.

        Returns:
            The target, or None if the activity does not exist.
        """
        result = await self.db.execute(
            select(TakeHomeActivity.cdc_id).where(TakeHomeActivity.activity_id == activity_id)
        )
        row = result.one_or_none()
        if row is None:
            return None

        return await self._owner_target(row[0])

    def authorize(
        self,
        actor: Actor,
        operation: Operation,
        target: AccessTarget | None = None,
    ) -> AccessDecision:
        """Ask for a decision and log denials with their reason."""
        decision = authorize(actor, operation, target)
        if isinstance(decision, Deny):
            logger.info(
                "access_denied",
                user_id=actor.user_id,
                role=actor.role.value,
                operation=operation.value,
                reason=decision.reason.value,
            )
        return decision

    def require(
        self,
        actor: Actor,
        operation: Operation,
        target: AccessTarget | None = None,
    ) -> Scope:
        """Get the scope an operation is allowed in.

        Raises:
            AccessDeniedError: If the operation is denied.
        """
        decision = self.authorize(actor, operation, target)
        if isinstance(decision, Deny):
            raise AccessDeniedError(decision)
        return decision.scope

    async def _owner_target(self, tenant_id: int | None) -> AccessTarget:
        if tenant_id is None:
            return AccessTarget()
        target = await self.target_for_tenant(tenant_id)
        return target if target is not None else AccessTarget(tenant_id=tenant_id)

    async def _tenant_status(self, tenant_id: int) -> TenantStatus | None:
        result = await self.db.execute(select(Cdc.status).where(Cdc.cdc_id == tenant_id))
        status = result.scalar_one_or_none()
        if status is None:
            return None
        try:
            return TenantStatus(status)
        except ValueError:
            return TenantStatus.DEACTIVATED

    async def _linked_student_id(self, user_id: int) -> str | None:
        result = await self.db.execute(
            select(GuardianInfo.student_id).where(GuardianInfo.user_id == user_id)
        )
        return result.scalars().first()

    async def _student_tenant_id(self, student_id: str) -> int | None:
        result = await self.db.execute(
            select(Student.cdc_id).where(Student.student_id == student_id)
        )
        return result.scalar_one_or_none()

    def _address_geography(self, user: User) -> Geography | None:
        address = user.other_info.address if user.other_info is not None else None
        try:
            return parse_address(address)
        except IncompleteAddressError as e:
            logger.warning("actor_address_invalid", user_id=user.id, error=str(e))
            return None
