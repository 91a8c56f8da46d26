# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities.

Design Decisions:
-----------------
1. The wall clock is read once, in UTC, and converted to the configured
   zone.
2. Age and band calculations work on calendar dates. The reference date is
   always passed in by the caller; only the service layer falls back to
   ``today_in`` when a request does not carry one.

Usage:
------
    from src.utils.datetime import as_date, today_in

    as_of = as_date(request_time) if request_time else today_in("Asia/Manila")
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def today_in(tz_name: str) -> date:
    """Get today's calendar date in the given IANA timezone.

    Args:
        tz_name: Zone name such as ``Asia/Manila``.

    Returns:
        The local calendar date.
    """
    return utc_now().astimezone(ZoneInfo(tz_name)).date()


def as_date(value: date | datetime) -> date:
    """Reduce a date or datetime to a calendar date.

    ``datetime`` is a subclass of ``date``, so the check order matters.
    """
    if isinstance(value, datetime):
        return value.date()
    return value


def years_before(reference: date, years: int) -> date:
    """Shift a date back by whole calendar years.

    February 29 clamps to February 28 when the target year is not a leap
    year.

    Args:
        reference: Date to shift.
        years: Number of years to go back.

    Returns:
        The shifted date.
    """
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        return reference.replace(year=reference.year - years, day=28)
