# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database connection management."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from src.infrastructure.database import connection
from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)


@pytest.fixture
def session_factory():
    """Patch the sessionmaker with one yielding a mock session."""
    session = AsyncMock()
    maker = MagicMock()
    maker.return_value.__aenter__.return_value = session
    with patch.object(connection, "_sessionmaker", maker):
        yield session


class TestLifecycle:
    """Tests for init and close."""

    @pytest.mark.asyncio
    async def test_uninitialized(self):
        """Test that accessors refuse before init."""
        await close_database()

        with pytest.raises(DatabaseError, match="not initialized"):
            get_engine()
        with pytest.raises(DatabaseError):
            get_sessionmaker()
        assert await check_database_connection() is False

    @pytest.mark.asyncio
    async def test_init_and_close(self, settings):
        """Test that the engine uses the configured URL and pool."""
        await init_database(settings)
        try:
            engine = get_engine()
            assert engine.url.database == "cdc_admin"
            assert engine.pool.size() == settings.database.pool_size
            assert get_sessionmaker() is not None
        finally:
            await close_database()

        with pytest.raises(DatabaseError):
            get_engine()


class TestGetSession:
    """Tests for get_session."""

    @pytest.mark.asyncio
    async def test_commit_on_success(self, session_factory):
        """Test that a clean block commits."""
        async with get_session() as session:
            assert session is session_factory

        session_factory.commit.assert_called_once()
        session_factory.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_database_error_wrapped(self, session_factory):
        """Test that driver errors roll back and are wrapped."""
        with pytest.raises(DatabaseError) as exc_info:
            async with get_session():
                raise OperationalError("SELECT", {}, Exception("gone"))

        session_factory.rollback.assert_called_once()
        assert isinstance(exc_info.value.original_error, OperationalError)

    @pytest.mark.asyncio
    async def test_other_error_propagates(self, session_factory):
        """Test that other errors roll back and pass through."""
        with pytest.raises(KeyError):
            async with get_session():
                raise KeyError("x")

        session_factory.rollback.assert_called_once()
        session_factory.commit.assert_not_called()


class TestDatabaseError:
    """Tests for DatabaseError."""

    def test_str_includes_cause(self):
        """Test the message with and without an original error."""
        assert str(DatabaseError("failed")) == "failed"
        assert str(DatabaseError("failed", ValueError("boom"))) == "failed: boom"
