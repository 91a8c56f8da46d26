# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Age and age-band models."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Age(BaseModel):
    """Age of a child at a reference date.

    Attributes:
        years: Completed years.
        months: Completed months past the last birthday (0-11).
        total_months: Completed months since birth. Used for every decision.
        decimal_years: years + months/12 rounded to one place. Display only.
    """

    model_config = ConfigDict(frozen=True)

    years: int = Field(ge=0)
    months: int = Field(ge=0, le=11)
    total_months: int = Field(ge=0)
    decimal_years: float


class MonthRange(BaseModel):
    """Closed interval of ages in months."""

    model_config = ConfigDict(frozen=True)

    min_months: int = Field(ge=0)
    max_months: int = Field(ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "MonthRange":
        """Reject inverted ranges."""
        if self.min_months > self.max_months:
            raise ValueError("min_months must not exceed max_months")
        return self

    def contains(self, total_months: int) -> bool:
        """Check membership, inclusive on both ends."""
        return self.min_months <= total_months <= self.max_months


class AgeBand(BaseModel):
    """A catalog age band as stored.

    Attributes:
        id: Catalog id, or the canonical label for built-in bands.
        raw_range: Stored text such as ``3.1-4.0``.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    raw_range: str
