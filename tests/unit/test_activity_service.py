# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the activity service."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.domains.access.scope import AccessDeniedError, DenyReason
from src.domains.activity.service import (
    ActivityNotFoundError,
    ActivityService,
    ActivityServiceError,
    UnknownAgeGroupError,
)
from src.infrastructure.database.models.content import TakeHomeActivity
from src.models.homework import ActivityRequest
from src.models.person import Identity

WORKER = Identity(user_id=1, role="worker", tenant_id=7)
PRESIDENT = Identity(user_id=4, role="president", tenant_id=7)


def activity_row(activity_id=3, cdc_id=7, age_group_id=1):
    row = MagicMock()
    row.activity_id = activity_id
    row.title = "Color the shapes"
    row.description = None
    row.due_date = None
    row.age_group_id = age_group_id
    row.file_path = "uploads/shapes.pdf"
    row.cdc_id = cdc_id
    row.creation_date = datetime(2025, 1, 6, tzinfo=timezone.utc)
    return row


def age_group(age_group_id=1, age_range="3.0-4.0"):
    row = MagicMock()
    row.age_group_id = age_group_id
    row.age_range = age_range
    return row


@pytest.fixture
def activity_service(mock_db, settings):
    """Create activity service with mock database."""
    return ActivityService(db=mock_db, settings=settings)


@pytest.fixture
def worker_rows(results, make_user):
    """Execute results that resolve an active worker of CDC 7."""
    return [
        results.scalar(make_user(user_id=1, role="worker", cdc_id=7)),
        results.scalar("active"),
    ]


@pytest.fixture
def request_body():
    """Create an activity request."""
    return ActivityRequest(title="Count to ten", due_date=date(2025, 1, 17), age_group_id=1)


class TestCreateActivity:
    """Tests for creating activities."""

    @pytest.mark.asyncio
    async def test_create_in_own_cdc(self, activity_service, mock_db, results, worker_rows, request_body):
        """Test that the activity is owned by the worker's CDC."""
        mock_db.execute.side_effect = [*worker_rows, results.scalar(age_group())]

        async def assign_id(row):
            row.activity_id = 12

        mock_db.refresh.side_effect = assign_id

        summary = await activity_service.create_activity(WORKER, request_body)

        row = mock_db.add.call_args[0][0]
        assert isinstance(row, TakeHomeActivity)
        assert row.cdc_id == 7
        assert row.created_by == 1
        assert row.due_date == date(2025, 1, 17)
        assert summary.activity_id == 12
        assert summary.age_range == "3.0-4.0"

    @pytest.mark.asyncio
    async def test_unknown_age_group(self, activity_service, mock_db, results, worker_rows, request_body):
        """Test that an age group outside the catalog is refused."""
        mock_db.execute.side_effect = [*worker_rows, results.scalar(None)]

        with pytest.raises(UnknownAgeGroupError):
            await activity_service.create_activity(WORKER, request_body)

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_president_cannot_create(self, activity_service, mock_db, results, make_user, request_body):
        """Test that managing activities is a worker operation."""
        mock_db.execute.side_effect = [
            results.scalar(make_user(user_id=4, role="president", cdc_id=7)),
            results.scalar("active"),
        ]

        with pytest.raises(AccessDeniedError) as exc_info:
            await activity_service.create_activity(PRESIDENT, request_body)

        assert exc_info.value.reason == DenyReason.ROLE_NOT_PERMITTED

    @pytest.mark.asyncio
    async def test_deactivated_cdc(self, activity_service, mock_db, results, make_user, request_body):
        """Test that a worker of a deactivated CDC cannot create activities."""
        mock_db.execute.side_effect = [
            results.scalar(make_user(user_id=1, role="worker", cdc_id=7)),
            results.scalar("deactivated"),
        ]

        with pytest.raises(AccessDeniedError) as exc_info:
            await activity_service.create_activity(WORKER, request_body)

        assert exc_info.value.reason == DenyReason.DEACTIVATED_TENANT


class TestListActivities:
    """Tests for listing activities."""

    @pytest.mark.asyncio
    async def test_list_with_age_range(self, activity_service, mock_db, results, worker_rows):
        """Test that activities carry their catalog age range."""
        mock_db.execute.side_effect = [
            *worker_rows,
            results.rows([(activity_row(), "3.0-4.0"), (activity_row(activity_id=4, age_group_id=None), None)]),
        ]

        activities = await activity_service.list_activities(WORKER)

        assert [a.activity_id for a in activities] == [3, 4]
        assert activities[0].age_range == "3.0-4.0"
        assert activities[1].age_range is None


class TestChangeActivity:
    """Tests for updating and deleting activities."""

    @pytest.mark.asyncio
    async def test_update(self, activity_service, mock_db, results, make_cdc, worker_rows, request_body):
        """Test that details are replaced and the stored file kept."""
        row = activity_row()
        mock_db.execute.side_effect = [
            *worker_rows,
            results.rows([(7,)]),
            results.scalar(make_cdc(cdc_id=7)),
            results.scalar(row),
            results.scalar(age_group()),
        ]

        summary = await activity_service.update_activity(WORKER, 3, request_body)

        assert row.title == "Count to ten"
        assert row.file_path == "uploads/shapes.pdf"
        assert summary.due_date is not None
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_update_other_cdc(self, activity_service, mock_db, results, make_cdc, worker_rows, request_body):
        """Test that the owning CDC is read from the stored activity."""
        mock_db.execute.side_effect = [
            *worker_rows,
            results.rows([(9,)]),
            results.scalar(make_cdc(cdc_id=9, municipality="Nasugbu")),
        ]

        with pytest.raises(AccessDeniedError) as exc_info:
            await activity_service.update_activity(WORKER, 3, request_body)

        assert exc_info.value.reason == DenyReason.CROSS_TENANT
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_unowned_activity(self, activity_service, mock_db, results, worker_rows):
        """Test that an activity owned by no CDC cannot be deleted."""
        mock_db.execute.side_effect = [*worker_rows, results.rows([(None,)])]

        with pytest.raises(AccessDeniedError) as exc_info:
            await activity_service.delete_activity(WORKER, 3)

        assert exc_info.value.reason == DenyReason.CROSS_TENANT

    @pytest.mark.asyncio
    async def test_delete_missing(self, activity_service, mock_db, results, worker_rows):
        """Test that a missing activity is reported."""
        mock_db.execute.side_effect = [*worker_rows, results.rows([])]

        with pytest.raises(ActivityNotFoundError):
            await activity_service.delete_activity(WORKER, 3)

    @pytest.mark.asyncio
    async def test_delete(self, activity_service, mock_db, results, make_cdc, worker_rows):
        """Test that an own activity is deleted."""
        row = activity_row()
        mock_db.execute.side_effect = [
            *worker_rows,
            results.rows([(7,)]),
            results.scalar(make_cdc(cdc_id=7)),
            results.scalar(row),
        ]

        await activity_service.delete_activity(WORKER, 3)

        mock_db.delete.assert_called_once_with(row)
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_delete_failure_rolls_back(self, activity_service, mock_db, results, make_cdc, worker_rows):
        """Test that a failed delete is rolled back and reported."""
        mock_db.execute.side_effect = [
            *worker_rows,
            results.rows([(7,)]),
            results.scalar(make_cdc(cdc_id=7)),
            results.scalar(activity_row()),
        ]
        mock_db.commit.side_effect = OperationalError("DELETE", {}, Exception("connection lost"))

        with pytest.raises(ActivityServiceError):
            await activity_service.delete_activity(WORKER, 3)

        mock_db.rollback.assert_called_once()
