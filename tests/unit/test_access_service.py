# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for actor and target resolution."""

import pytest
import structlog

from src.domains.access.scope import (
    AccessDeniedError,
    AccessTarget,
    Actor,
    Allow,
    Deny,
    DenyReason,
    Operation,
    TenantScope,
)
from src.domains.access.service import AccessService
from src.models.common import Role, TenantStatus
from src.models.person import Identity


@pytest.fixture
def access_service(mock_db):
    """Create access service with mock database."""
    return AccessService(db=mock_db)


class TestResolveActor:
    """Tests for resolve_actor."""

    @pytest.mark.asyncio
    async def test_president(self, access_service, mock_db, results, make_user):
        """Test that staff resolve with their CDC status."""
        mock_db.execute.side_effect = [
            results.scalar(make_user(role="president", cdc_id=7)),
            results.scalar("active"),
        ]

        actor = await access_service.resolve_actor(Identity(user_id=1, role="president", tenant_id=7))

        assert actor.role == Role.PRESIDENT
        assert actor.tenant_id == 7
        assert actor.tenant_status == TenantStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_deleted_account(self, access_service, mock_db, results):
        """Test that a missing account resolves to an unassigned actor."""
        mock_db.execute.return_value = results.scalar(None)

        actor = await access_service.resolve_actor(Identity(user_id=1, role="president", tenant_id=7))

        assert actor.role == Role.UNASSIGNED
        assert actor.tenant_id is None

    @pytest.mark.asyncio
    async def test_context_released(self, access_service, mock_db, results, make_user):
        """Test that the actor's log context does not outlive resolution."""
        mock_db.execute.side_effect = [
            results.scalar(make_user(role="president", cdc_id=7)),
            results.scalar("active"),
        ]

        await access_service.resolve_actor(Identity(user_id=1, role="president", tenant_id=7))

        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_stored_role_wins(self, access_service, mock_db, results, make_user):
        """Test that a role change takes effect on the next call."""
        mock_db.execute.side_effect = [
            results.scalar(make_user(role="worker", cdc_id=7)),
            results.scalar("active"),
        ]

        actor = await access_service.resolve_actor(Identity(user_id=1, role="president", tenant_id=7))

        assert actor.role == Role.WORKER

    @pytest.mark.asyncio
    async def test_deactivated_tenant(self, access_service, mock_db, results, make_user):
        """Test that CDC status is re-read."""
        mock_db.execute.side_effect = [
            results.scalar(make_user(role="worker", cdc_id=7)),
            results.scalar("deactivated"),
        ]

        actor = await access_service.resolve_actor(Identity(user_id=1, role="worker", tenant_id=7))

        assert actor.tenant_status == TenantStatus.DEACTIVATED

    @pytest.mark.asyncio
    async def test_parent_with_linked_child(self, access_service, mock_db, results, make_user):
        """Test that a parent resolves through guardian linkage."""
        mock_db.execute.side_effect = [
            results.scalar(make_user(user_id=2, role="parent", cdc_id=None)),
            results.scalars(["S-1"]),
            results.scalar(7),
            results.scalar("active"),
        ]

        actor = await access_service.resolve_actor(Identity(user_id=2, role="parent"))

        assert actor.linked_student_id == "S-1"
        assert actor.linked_student_tenant_id == 7
        assert actor.linked_student_tenant_status == TenantStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_parent_without_link(self, access_service, mock_db, results, make_user):
        """Test a parent that was unlinked."""
        mock_db.execute.side_effect = [
            results.scalar(make_user(user_id=2, role="parent", cdc_id=None)),
            results.scalars([]),
        ]

        actor = await access_service.resolve_actor(Identity(user_id=2, role="parent"))

        assert actor.linked_student_id is None
        assert access_service.authorize(actor, Operation.VIEW_CHILD) == Deny(DenyReason.NO_LINKED_STUDENT)

    @pytest.mark.asyncio
    async def test_focal_geography(self, access_service, mock_db, results, make_user):
        """Test that a focal person is placed by their address."""
        mock_db.execute.return_value = results.scalar(
            make_user(user_id=3, role="focal", cdc_id=None, address="Bagong Pook, Lian, Batangas")
        )

        actor = await access_service.resolve_actor(Identity(user_id=3, role="focal"))

        assert actor.geography.municipality == "Lian"
        assert actor.geography.province == "Batangas"

    @pytest.mark.asyncio
    async def test_focal_malformed_address(self, access_service, mock_db, results, make_user):
        """Test that a malformed address leaves the focal person unplaced."""
        mock_db.execute.return_value = results.scalar(
            make_user(user_id=3, role="focal", cdc_id=None, address="Lian")
        )

        actor = await access_service.resolve_actor(Identity(user_id=3, role="focal"))

        assert actor.geography is None


class TestTargets:
    """Tests for target re-derivation."""

    @pytest.mark.asyncio
    async def test_target_for_student(self, access_service, mock_db, results, make_cdc):
        """Test that a child's CDC comes from the stored record."""
        mock_db.execute.side_effect = [
            results.scalar(9),
            results.scalar(make_cdc(cdc_id=9, municipality="Nasugbu")),
        ]

        target = await access_service.target_for_student("S-2")

        assert target.tenant_id == 9
        assert target.student_id == "S-2"
        assert target.tenant_status == TenantStatus.ACTIVE
        assert target.location.municipality == "Nasugbu"

    @pytest.mark.asyncio
    async def test_missing_student(self, access_service, mock_db, results):
        """Test an unknown child."""
        mock_db.execute.return_value = results.scalar(None)

        assert await access_service.target_for_student("S-404") is None

    @pytest.mark.asyncio
    async def test_broadcast_content(self, access_service, mock_db, results):
        """Test that broadcast content has no CDC."""
        mock_db.execute.return_value = results.rows([(None,)])

        assert await access_service.target_for_content(5) == AccessTarget()

    @pytest.mark.asyncio
    async def test_missing_content(self, access_service, mock_db, results):
        """Test unknown content."""
        mock_db.execute.return_value = results.rows([])

        assert await access_service.target_for_content(5) is None

    @pytest.mark.asyncio
    async def test_tenant_content(self, access_service, mock_db, results, make_cdc):
        """Test content owned by a CDC."""
        mock_db.execute.side_effect = [
            results.rows([(7,)]),
            results.scalar(make_cdc(cdc_id=7)),
        ]

        target = await access_service.target_for_content(5)

        assert target.tenant_id == 7
        assert target.location.municipality == "Lian"

    @pytest.mark.asyncio
    async def test_activity_of_deactivated_cdc(self, access_service, mock_db, results, make_cdc):
        """Test that an activity's target carries its CDC's current status."""
        mock_db.execute.side_effect = [
            results.rows([(9,)]),
            results.scalar(make_cdc(cdc_id=9, status="deactivated")),
        ]

        target = await access_service.target_for_activity(3)

        assert target.tenant_id == 9
        assert target.tenant_status == TenantStatus.DEACTIVATED

    @pytest.mark.asyncio
    async def test_missing_activity(self, access_service, mock_db, results):
        """Test an unknown activity."""
        mock_db.execute.return_value = results.rows([])

        assert await access_service.target_for_activity(3) is None


class TestRequire:
    """Tests for require."""

    def test_allowed_scope(self, access_service):
        """Test that the scope of an allowed operation is returned."""
        actor = Actor(user_id=1, role=Role.WORKER, tenant_id=7, tenant_status=TenantStatus.ACTIVE)

        assert access_service.require(actor, Operation.READ_STUDENTS) == TenantScope(7)

    def test_denied_raises(self, access_service):
        """Test that a denial raises with its reason."""
        actor = Actor(user_id=1, role=Role.WORKER, tenant_id=7, tenant_status=TenantStatus.ACTIVE)
        target = AccessTarget(tenant_id=9, tenant_status=TenantStatus.ACTIVE)

        with pytest.raises(AccessDeniedError) as exc_info:
            access_service.require(actor, Operation.READ_STUDENTS, target)

        assert exc_info.value.reason == DenyReason.CROSS_TENANT

    def test_authorize_returns_decision(self, access_service):
        """Test that authorize passes decisions through."""
        actor = Actor(user_id=5, role=Role.MSW)

        assert isinstance(access_service.authorize(actor, Operation.VIEW_AGGREGATES), Allow)
