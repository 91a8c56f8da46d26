# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures."""

import logging
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from src.core.config.settings import DatabaseSettings, Settings
from src.utils.logging import HANDLER_NAME


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Provide settings that do not depend on the environment."""
    return Settings(
        environment="development",
        timezone="Asia/Manila",
        database=DatabaseSettings(),
    )


@pytest.fixture
def as_of() -> date:
    """Provide a fixed reference date."""
    return date(2025, 1, 10)


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging() and bound context after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    for handler in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(handler)
    root.setLevel(level)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    return db


class DbResults:
    """Builders for the execute() results services consume."""

    @staticmethod
    def scalar(value):
        """Result whose scalar_one_or_none() returns value."""
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        result.scalar.return_value = value
        return result

    @staticmethod
    def scalars(values):
        """Result whose scalars() yields values."""
        values = list(values)
        result = MagicMock()
        result.scalars.return_value.all.return_value = values
        result.scalars.return_value.first.return_value = values[0] if values else None
        return result

    @staticmethod
    def rows(rows):
        """Result whose all() returns rows and one_or_none() the first row."""
        rows = list(rows)
        result = MagicMock()
        result.all.return_value = rows
        result.one_or_none.return_value = rows[0] if rows else None
        return result


@pytest.fixture
def results() -> type[DbResults]:
    """Provide execute() result builders."""
    return DbResults


# =============================================================================
# Row Factories
# =============================================================================


def _make_cdc(cdc_id=7, name="Matabungkay CDC", status="active", municipality="Lian", province="Batangas", located=True):
    cdc = MagicMock()
    cdc.cdc_id = cdc_id
    cdc.name = name
    cdc.status = status
    if located:
        cdc.location.region = "IV-A"
        cdc.location.province = province
        cdc.location.municipality = municipality
        cdc.location.barangay = "Matabungkay"
    else:
        cdc.location = None
    return cdc


def _make_user(user_id=1, role="president", cdc_id=7, address=None, username="user1", full_name=None):
    user = MagicMock()
    user.id = user_id
    user.type = role
    user.cdc_id = cdc_id
    user.username = username
    user.other_info.address = address
    user.other_info.full_name = full_name
    return user


@pytest.fixture
def make_cdc():
    """Provide a factory for CDC rows with a joined location."""
    return _make_cdc


@pytest.fixture
def make_user():
    """Provide a factory for user rows with profile info."""
    return _make_user
