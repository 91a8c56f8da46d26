# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""CDC tenant models."""

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import TenantStatus
from src.models.person import Geography


class Tenant(BaseModel):
    """A Child Development Center.

    Attributes:
        id: CDC identifier.
        name: Display name.
        status: Active or deactivated.
        location: Location row; None only when data integrity is broken.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    status: TenantStatus = TenantStatus.ACTIVE
    location: Geography | None = None

    @property
    def is_active(self) -> bool:
        """Check if the CDC is active."""
        return self.status == TenantStatus.ACTIVE


class TenantCreateRequest(BaseModel):
    """Request to register a CDC together with its location."""

    name: str = Field(min_length=1, max_length=255)
    region: str = Field(min_length=1, max_length=100)
    province: str = Field(min_length=1, max_length=100)
    municipality: str = Field(min_length=1, max_length=100)
    barangay: str = Field(min_length=1, max_length=100)
