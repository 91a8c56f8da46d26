# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Age computation from a birthdate and an explicit reference date.

Every consumer that needs a child's age goes through compute_age(). The
reference date is always a parameter so results are deterministic.

Example:
    >>> from datetime import date
    >>> age = compute_age(date(2021, 6, 15), date(2025, 1, 10))
    >>> age.years, age.months, age.total_months, age.decimal_years
    (3, 6, 42, 3.5)
"""

from datetime import date, datetime

from src.models.age import Age
from src.utils.datetime import as_date


class AgeError(Exception):
    """Base exception for age and age-band errors."""

    pass


class InvalidAgeError(AgeError):
    """Raised when the birthdate lies after the reference date."""

    pass


def compute_age(birthdate: date | datetime, as_of: date | datetime) -> Age:
    """Compute a child's age at a reference date.

    A month counts once the reference day-of-month reaches the birth
    day-of-month. The day borrow is applied exactly once, before negative
    months are normalized by borrowing a year.

    Args:
        birthdate: Date of birth.
        as_of: Reference date.

    Returns:
        Age with years, months, total months and a display decimal.

    Raises:
        InvalidAgeError: If birthdate is after as_of.
    """
    born = as_date(birthdate)
    ref = as_date(as_of)

    if born > ref:
        raise InvalidAgeError(f"Birthdate {born.isoformat()} is after {ref.isoformat()}")

    years = ref.year - born.year
    months = ref.month - born.month

    if ref.day < born.day:
        months -= 1

    if months < 0:
        years -= 1
        months += 12

    return Age(
        years=years,
        months=months,
        total_months=years * 12 + months,
        decimal_years=round(years + months / 12, 1),
    )


def age_in_months(birthdate: date | datetime, as_of: date | datetime) -> int:
    """Shortcut for compute_age(...).total_months."""
    return compute_age(birthdate, as_of).total_months
