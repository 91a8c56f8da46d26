# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student enrollment and listing models."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChildInfoRequest(BaseModel):
    """Child profile details."""

    address: str | None = None
    first_language: str | None = None
    second_language: str | None = None


class GuardianInfoRequest(BaseModel):
    """Guardian details. Linking to a parent account happens separately."""

    name: str = Field(min_length=1, max_length=255)
    relationship: str | None = None
    email_address: str | None = None
    phone_number: str | None = None


class ParentInfoRequest(BaseModel):
    """Mother or father details."""

    name: str = Field(min_length=1, max_length=255)
    occupation: str | None = None
    address: str | None = None
    home_contact: str | None = None
    work_contact: str | None = None


class StudentEnrollRequest(BaseModel):
    """Request to enroll a child in the caller's CDC.

    Attributes:
        student_id: Manually assigned identifier.
        first_name: Child first name.
        middle_name: Child middle name.
        last_name: Child last name.
        birthdate: Date of birth.
        gender: Gender as recorded on the enrollment form.
        child: Child profile details.
        guardian: Guardian details.
        mother: Mother details.
        father: Father details.
    """

    student_id: str = Field(min_length=1, max_length=50)
    first_name: str = Field(min_length=1, max_length=100)
    middle_name: str | None = None
    last_name: str = Field(min_length=1, max_length=100)
    birthdate: date
    gender: str | None = None
    child: ChildInfoRequest = Field(default_factory=ChildInfoRequest)
    guardian: GuardianInfoRequest
    mother: ParentInfoRequest
    father: ParentInfoRequest

    @field_validator("student_id")
    @classmethod
    def strip_student_id(cls, value: str) -> str:
        """Trim surrounding whitespace from the identifier."""
        value = value.strip()
        if not value:
            raise ValueError("student_id must not be blank")
        return value


class StudentSummary(BaseModel):
    """Student row annotated with its age at the reference date."""

    model_config = ConfigDict(frozen=True)

    student_id: str
    first_name: str
    middle_name: str | None = None
    last_name: str
    birthdate: date
    gender: str | None = None
    tenant_id: int
    age_years: int
    age_months: int
    total_months: int
    decimal_age: float
    age_band: str | None = None
