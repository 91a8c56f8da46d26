# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for reference data seeds."""

import pytest

from src.domains.age.bands import AgeBandTable
from src.models.age import AgeBand
from src.infrastructure.database.models import AgeGroup
from src.infrastructure.database.seeds import DEFAULT_AGE_RANGES, seed_age_groups


class TestSeedAgeGroups:
    """Tests for seed_age_groups."""

    @pytest.mark.asyncio
    async def test_seeds_empty_catalog(self, mock_db, results):
        """Test that an empty catalog gets the default ranges."""
        mock_db.execute.return_value = results.scalar(0)

        groups = await seed_age_groups(mock_db)

        assert [g.age_range for g in groups] == list(DEFAULT_AGE_RANGES)
        assert all(isinstance(g, AgeGroup) for g in groups)
        mock_db.add_all.assert_called_once_with(groups)
        mock_db.flush.assert_called_once()

    @pytest.mark.asyncio
    async def test_skips_populated_catalog(self, mock_db, results):
        """Test that existing rows are left alone."""
        mock_db.execute.return_value = results.scalar(3)

        assert await seed_age_groups(mock_db) == []
        mock_db.add_all.assert_not_called()

    def test_default_ranges_parse(self):
        """Test that every default range is understood by the classifier."""
        table = AgeBandTable(
            AgeBand(id=i, raw_range=raw) for i, raw in enumerate(DEFAULT_AGE_RANGES, start=1)
        )

        assert len(table) == len(DEFAULT_AGE_RANGES)
        assert table.skipped == []
