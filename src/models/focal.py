# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Focal person account models."""

from pydantic import BaseModel, Field, field_validator


class FocalAccountCreateRequest(BaseModel):
    """Request to create the focal person account of a municipality.

    The password is hashed by the credential store before it reaches the
    core; only the hash is persisted here.
    """

    username: str = Field(min_length=1, max_length=100)
    password_hash: str = Field(min_length=1)
    barangay: str = Field(min_length=1, max_length=100)
    municipality: str = Field(min_length=1, max_length=100)
    province: str = Field(min_length=1, max_length=100)

    @field_validator("barangay", "municipality", "province")
    @classmethod
    def strip_place(cls, value: str) -> str:
        """Trim place names; commas would corrupt the stored address."""
        value = value.strip()
        if not value or "," in value:
            raise ValueError("place names must be non-empty and contain no commas")
        return value

    @property
    def address(self) -> str:
        """Comma-separated address stored as the account's geography."""
        return f"{self.barangay}, {self.municipality}, {self.province}"


class FocalAccountResponse(BaseModel):
    """Created focal account."""

    id: int
    username: str
    municipality: str
