# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""People: authenticated callers, user accounts and enrolled children."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.common import Role


def normalize_place(value: str | None) -> str:
    """Normalize a place name for comparison."""
    if not value:
        return ""
    return " ".join(value.split()).casefold()


class Identity(BaseModel):
    """Verified caller identity handed over by the authentication layer.

    The core trusts who the caller is but re-validates role and tenant
    against the data store on every scoped access.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    role: Role
    tenant_id: int | None = None

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, value: object) -> Role:
        """Map unknown role strings to UNASSIGNED."""
        return Role.parse(value)  # type: ignore[arg-type]


class Person(BaseModel):
    """A user account as stored.

    Attributes:
        id: User identifier.
        role: Account role.
        tenant_id: Home CDC, if any.
        address: Free-text address, the geography source for focal persons.
        linked_student_id: Child linked through guardian info (parents).
    """

    model_config = ConfigDict(frozen=True)

    id: int
    role: Role
    tenant_id: int | None = None
    address: str | None = None
    linked_student_id: str | None = None

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, value: object) -> Role:
        """Map unknown role strings to UNASSIGNED."""
        return Role.parse(value)  # type: ignore[arg-type]


class Child(BaseModel):
    """An enrolled child. Every child belongs to exactly one CDC."""

    model_config = ConfigDict(frozen=True)

    id: str
    tenant_id: int
    birthdate: date


class Geography(BaseModel):
    """Place of a CDC or of a geography-scoped viewer.

    Attributes:
        barangay: Barangay name.
        municipality: Municipality or city name.
        province: Province name.
        region: Region name, when known.
    """

    model_config = ConfigDict(frozen=True)

    barangay: str = ""
    municipality: str
    province: str
    region: str | None = None

    def same_locale(self, other: "Geography") -> bool:
        """Check whether two places share municipality and province.

        Comparison ignores case and repeated whitespace.
        """
        return (
            normalize_place(self.municipality) == normalize_place(other.municipality)
            and normalize_place(self.province) == normalize_place(other.province)
        )


class ChildStanding(BaseModel):
    """A child's tenant and age at a reference date."""

    model_config = ConfigDict(frozen=True)

    student_id: str
    tenant_id: int
    total_months: int = Field(ge=0)
