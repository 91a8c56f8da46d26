# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for age computation."""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.domains.age.clock import InvalidAgeError, age_in_months, compute_age


class TestComputeAge:
    """Tests for compute_age."""

    def test_years_months_and_decimal(self):
        """Test a child born mid-June measured in January."""
        age = compute_age(date(2021, 6, 15), date(2025, 1, 10))

        assert age.years == 3
        assert age.months == 6
        assert age.total_months == 42
        assert age.decimal_years == 3.5

    def test_same_day_is_zero(self):
        """Test that a child is zero months old on the birth date."""
        age = compute_age(date(2024, 5, 1), date(2024, 5, 1))

        assert age.total_months == 0
        assert age.decimal_years == 0.0

    def test_birthday_completes_the_year(self):
        """Test that the birthday itself counts the full year."""
        assert compute_age(date(2020, 3, 15), date(2023, 3, 15)).total_months == 36

    def test_day_before_birthday(self):
        """Test that the day before the birthday is still one month short."""
        age = compute_age(date(2020, 3, 15), date(2023, 3, 14))

        assert age.years == 2
        assert age.months == 11
        assert age.total_months == 35

    def test_day_borrow_applied_once(self):
        """Test that a short month does not borrow a second time."""
        age = compute_age(date(2020, 1, 31), date(2020, 3, 1))

        assert age.years == 0
        assert age.months == 1
        assert age.total_months == 1

    def test_leap_day_birth_in_common_year(self):
        """Test a February 29 birth measured on February 28."""
        assert compute_age(date(2020, 2, 29), date(2021, 2, 28)).total_months == 11
        assert compute_age(date(2020, 2, 29), date(2021, 3, 1)).total_months == 12

    def test_decimal_years_rounded_to_one_place(self):
        """Test that decimal years are rounded for display."""
        assert compute_age(date(2020, 1, 1), date(2024, 12, 1)).decimal_years == 4.9

    def test_accepts_datetimes(self):
        """Test that datetimes are reduced to calendar dates."""
        age = compute_age(
            datetime(2021, 6, 15, 23, 0, tzinfo=timezone.utc),
            datetime(2025, 1, 10, 8, 30, tzinfo=timezone.utc),
        )

        assert age.total_months == 42

    def test_future_birthdate_raises(self):
        """Test that a birthdate after the reference date is rejected."""
        with pytest.raises(InvalidAgeError):
            compute_age(date(2025, 1, 11), date(2025, 1, 10))

    @pytest.mark.parametrize(
        "born",
        [date(2019, 8, 1), date(2019, 8, 15), date(2019, 8, 28), date(2019, 8, 31), date(2020, 2, 29)],
    )
    def test_total_months_steps_on_birth_day(self, born):
        """Test that age grows by one month exactly when the birth day comes round."""
        previous = 0
        for offset in range(1, 2400):
            day = born + timedelta(days=offset)
            age = compute_age(born, day)
            step = age.total_months - previous

            # A month too short for the birth day carries over to the 1st
            last_month_end = day - timedelta(days=day.day)
            expected = day.day == born.day or (day.day == 1 and last_month_end.day < born.day)

            assert 0 <= age.months <= 11
            assert age.total_months == age.years * 12 + age.months
            assert step == (1 if expected else 0), day
            previous = age.total_months

    def test_age_in_months_shortcut(self):
        """Test the total-months shortcut."""
        assert age_in_months(date(2021, 6, 15), date(2025, 1, 10)) == 42
