# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Age-band catalog parsing and classification.

Stored age ranges are loosely formatted text such as ``3.1-4.0`` or
``5.1-5.11`` where each side is ``years.months``. Upstream data has at
times replaced the decimal point or the range dash with a single
placeholder character (``3.1?4.0``, ``3?1-4?0``). parse_range() accepts
every known variant.

Classification is first-match in declared order, inclusive on both ends,
so overlapping catalog rows still resolve to exactly one band.

The canonical bands ``3-4``, ``4-5`` and ``5-6`` are half-open year
windows ``[N, N+1)``. They are available both as a catalog
(AgeBandTable.canonical()) and as calendar windows over birthdates
(canonical_band_for(), birthdate_window()); the two agree on every
boundary.
"""

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime

from src.domains.age.clock import AgeError, InvalidAgeError
from src.models.age import AgeBand, MonthRange
from src.models.common import CANONICAL_BAND_LABELS
from src.utils.datetime import as_date, years_before

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDERS = "?�"

_RANGE_DASHES = ("-", "–")
_DASH_SPACING = re.compile(r"\s*([-–])\s*")
_SIDE_PATTERN = re.compile(r"^(\d{1,2})(?:\.(\d{1,2}))?$")


class UnparseableRangeError(AgeError):
    """Raised when a stored age range cannot be parsed."""

    pass


class UnknownAgeBandError(AgeError):
    """Raised when a canonical band label is not recognised."""

    pass


def _side_to_months(side: str, raw: str) -> int:
    match = _SIDE_PATTERN.match(side.strip())
    if not match:
        raise UnparseableRangeError(f"Malformed age {side!r} in range {raw!r}")

    years = int(match.group(1))
    months = int(match.group(2) or 0)
    if months > 11:
        raise UnparseableRangeError(f"Month component {months} out of range in {raw!r}")

    return years * 12 + months


def _split_sides(token: str, placeholders: str, raw: str) -> tuple[str, str]:
    # Dotted form: a real dash delimits the range, placeholders are decimal points
    for dash in _RANGE_DASHES:
        if dash in token:
            parts = token.split(dash)
            if len(parts) != 2:
                raise UnparseableRangeError(f"Expected one range delimiter in {raw!r}")
            left, right = (
                "".join("." if ch in placeholders else ch for ch in part) for part in parts
            )
            return left, right

    marks = [index for index, ch in enumerate(token) if ch in placeholders]

    if len(marks) == 1:
        return token[: marks[0]], token[marks[0] + 1 :]

    # Y?M?Y?M: outer placeholders are decimal points, the middle one delimits
    if len(marks) == 3 and "." not in token:
        middle = marks[1]
        left = token[:middle].replace(token[marks[0]], ".")
        right = token[middle + 1 :].replace(token[marks[2]], ".")
        return left, right

    raise UnparseableRangeError(f"No range delimiter found in {raw!r}")


def parse_range(raw: str | None, placeholders: str = DEFAULT_PLACEHOLDERS) -> MonthRange:
    """Parse a stored age range into a month interval.

    Only the first whitespace-separated token is considered, so trailing
    notes such as ``3.1-4.0 yrs`` are ignored.

    Args:
        raw: Stored range text.
        placeholders: Characters that may stand for ``.`` or ``-``.

    Returns:
        Closed interval in months.

    Raises:
        UnparseableRangeError: If the text is empty, malformed or inverted.
    """
    if raw is None or not str(raw).strip():
        raise UnparseableRangeError("Empty age range")

    text = _DASH_SPACING.sub(r"\1", str(raw).strip())
    token = text.split()[0]

    left, right = _split_sides(token, placeholders, str(raw))
    low = _side_to_months(left, str(raw))
    high = _side_to_months(right, str(raw))

    if low > high:
        raise UnparseableRangeError(f"Inverted age range {raw!r}")

    return MonthRange(min_months=low, max_months=high)


@dataclass(frozen=True)
class ParsedBand:
    """A catalog band with its parsed interval."""

    id: int | str
    range: MonthRange


class AgeBandTable:
    """Ordered age-band catalog.

    Rows that fail to parse are skipped and logged; the rest classify
    normally.

    Example:
        >>> table = AgeBandTable.canonical()
        >>> table.classify(42)
        '3-4'
    """

    def __init__(
        self,
        bands: Iterable[AgeBand],
        placeholders: str = DEFAULT_PLACEHOLDERS,
    ) -> None:
        """Parse and index a catalog.

        Args:
            bands: Catalog rows in classification order.
            placeholders: Characters that may stand for ``.`` or ``-``.
        """
        self._bands: list[ParsedBand] = []
        self._skipped: list[int | str] = []

        for band in bands:
            try:
                month_range = parse_range(band.raw_range, placeholders)
            except UnparseableRangeError as e:
                logger.warning("Skipping age band %s: %s", band.id, e)
                self._skipped.append(band.id)
                continue
            self._bands.append(ParsedBand(id=band.id, range=month_range))

    @classmethod
    def canonical(cls) -> "AgeBandTable":
        """Build the table of canonical bands."""
        return cls(CANONICAL_BANDS)

    def __iter__(self) -> Iterator[ParsedBand]:
        return iter(self._bands)

    def __len__(self) -> int:
        return len(self._bands)

    @property
    def skipped(self) -> list[int | str]:
        """Ids of rows that could not be parsed."""
        return list(self._skipped)

    def range_of(self, band_id: int | str) -> MonthRange | None:
        """Get the interval of a band, or None if unknown or skipped."""
        for band in self._bands:
            if band.id == band_id:
                return band.range
        return None

    def classify(self, total_months: int) -> int | str | None:
        """Find the first band containing an age.

        Args:
            total_months: Completed months since birth.

        Returns:
            Band id, or None when no band matches.
        """
        for band in self._bands:
            if band.range.contains(total_months):
                return band.id
        return None


def _label_years(label: str) -> tuple[int, int]:
    if label not in CANONICAL_BAND_LABELS:
        raise UnknownAgeBandError(f"Unknown age band {label!r}")
    low, high = label.split("-")
    return int(low), int(high)


def _canonical_band(label: str) -> AgeBand:
    low, _high = _label_years(label)
    return AgeBand(id=label, raw_range=f"{low}.0-{low}.11")


CANONICAL_BANDS: tuple[AgeBand, ...] = tuple(_canonical_band(label) for label in CANONICAL_BAND_LABELS)


@dataclass(frozen=True)
class BirthdateWindow:
    """Birthdates belonging to a canonical band at a reference date.

    A birthdate ``b`` is inside the window when ``after < b <= until``.
    """

    after: date
    until: date

    def contains(self, birthdate: date | datetime) -> bool:
        """Check whether a birthdate falls inside the window."""
        born = as_date(birthdate)
        return self.after < born <= self.until


def birthdate_window(label: str, as_of: date | datetime) -> BirthdateWindow:
    """Compute the birthdate window of a canonical band.

    Args:
        label: Canonical band label such as ``4-5``.
        as_of: Reference date.

    Returns:
        The window for SQL filtering or direct checks.

    Raises:
        UnknownAgeBandError: If the label is not canonical.
    """
    low, high = _label_years(label)
    ref = as_date(as_of)
    return BirthdateWindow(after=years_before(ref, high), until=years_before(ref, low))


def canonical_band_for(birthdate: date | datetime, as_of: date | datetime) -> str | None:
    """Classify a child into a canonical band from calendar year windows.

    Used where no catalog is available. Agrees with
    ``AgeBandTable.canonical().classify(compute_age(...).total_months)``.

    Args:
        birthdate: Date of birth.
        as_of: Reference date.

    Returns:
        Canonical label, or None outside every band.

    Raises:
        InvalidAgeError: If birthdate is after as_of.
    """
    born = as_date(birthdate)
    ref = as_date(as_of)
    if born > ref:
        raise InvalidAgeError(f"Birthdate {born.isoformat()} is after {ref.isoformat()}")

    for label in CANONICAL_BAND_LABELS:
        if birthdate_window(label, ref).contains(born):
            return label
    return None
