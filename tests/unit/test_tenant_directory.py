# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for tenant and geography resolution."""

from datetime import date

import pytest

from src.domains.tenant.directory import (
    IncompleteAddressError,
    OrphanTenantError,
    TenantDirectory,
    TenantNotFoundError,
    parse_address,
)
from src.models.common import Role, TenantStatus
from src.models.person import Child, Geography, Person
from src.models.tenant import Tenant

LIAN = Geography(barangay="Matabungkay", municipality="Lian", province="Batangas", region="IV-A")


@pytest.fixture
def directory():
    """Create a directory with an active, a deactivated and an orphan CDC."""
    return TenantDirectory([
        Tenant(id=7, name="Matabungkay CDC", location=LIAN),
        Tenant(id=8, name="Closed CDC", status=TenantStatus.DEACTIVATED, location=LIAN),
        Tenant(id=9, name="Orphan CDC"),
    ])


class TestParseAddress:
    """Tests for parse_address."""

    def test_three_parts(self):
        """Test barangay, municipality and province."""
        geography = parse_address("Matabungkay, Lian, Batangas")

        assert geography.barangay == "Matabungkay"
        assert geography.municipality == "Lian"
        assert geography.province == "Batangas"
        assert geography.region is None

    def test_four_parts(self):
        """Test an address that includes the region."""
        assert parse_address("Matabungkay, Lian, Batangas, IV-A").region == "IV-A"

    def test_empty_parts_are_ignored(self):
        """Test that doubled commas do not shift the parts."""
        assert parse_address("Matabungkay,, Lian , Batangas").municipality == "Lian"

    @pytest.mark.parametrize(
        "address",
        [None, "", "Lian, Batangas", " , Lian, Batangas, ,", "a, b, c, d, e"],
    )
    def test_incomplete(self, address):
        """Test that malformed addresses are rejected."""
        with pytest.raises(IncompleteAddressError):
            parse_address(address)


class TestTenantDirectory:
    """Tests for TenantDirectory."""

    def test_membership(self, directory):
        """Test container behaviour."""
        assert 7 in directory
        assert 10 not in directory
        assert len(directory) == 3

    def test_get_unknown(self, directory):
        """Test lookup of an unknown CDC."""
        with pytest.raises(TenantNotFoundError):
            directory.get(10)

    def test_is_active(self, directory):
        """Test active status, including unknown ids."""
        assert directory.is_active(7)
        assert not directory.is_active(8)
        assert not directory.is_active(10)

    def test_location_of(self, directory):
        """Test location lookup."""
        assert directory.location_of(7) == LIAN

    def test_orphan_is_surfaced(self, directory):
        """Test that a CDC without location is an error."""
        with pytest.raises(OrphanTenantError):
            directory.location_of(9)

    def test_tenant_of_child(self, directory):
        """Test that a child resolves to its CDC."""
        child = Child(id="S-1", tenant_id=7, birthdate=date(2021, 6, 15))

        assert directory.tenant_of(child) == 7

    def test_focal_geography_from_address(self, directory):
        """Test that focal persons are placed by their address."""
        focal = Person(id=3, role=Role.FOCAL, address="Bagong Pook, Lian, Batangas")

        geography = directory.resolve_viewer_geography(focal)

        assert geography.municipality == "Lian"
        assert geography.barangay == "Bagong Pook"

    def test_focal_with_bad_address(self, directory):
        """Test that a focal person with a malformed address fails."""
        focal = Person(id=3, role=Role.FOCAL, address="Lian")

        with pytest.raises(IncompleteAddressError):
            directory.resolve_viewer_geography(focal)

    def test_worker_geography_from_tenant(self, directory):
        """Test that CDC staff are placed by their CDC."""
        worker = Person(id=4, role=Role.WORKER, tenant_id=7)

        assert directory.resolve_viewer_geography(worker) == LIAN

    def test_worker_without_tenant(self, directory):
        """Test that CDC staff without a CDC cannot be placed."""
        worker = Person(id=4, role=Role.WORKER)

        with pytest.raises(TenantNotFoundError):
            directory.resolve_viewer_geography(worker)


class TestGeography:
    """Tests for Geography comparison."""

    def test_same_locale_ignores_case_and_spacing(self):
        """Test normalized comparison."""
        other = Geography(municipality="  lian ", province="BATANGAS")

        assert LIAN.same_locale(other)

    def test_different_province(self):
        """Test that a same-named municipality elsewhere does not match."""
        other = Geography(municipality="Lian", province="Cavite")

        assert not LIAN.same_locale(other)
