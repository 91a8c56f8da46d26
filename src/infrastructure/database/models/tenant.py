# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""CDC and CDC location tables."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin


class CdcLocation(Base):
    """Location of a CDC. Immutable once children are enrolled."""

    __tablename__ = "cdc_location"

    location_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    province: Mapped[str] = mapped_column(String(100), nullable=False)
    municipality: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    barangay: Mapped[str] = mapped_column(String(100), nullable=False, index=True)


class Cdc(Base, TimestampMixin):
    """A Child Development Center (tenant)."""

    __tablename__ = "cdc"

    cdc_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active", server_default="active")
    location_id: Mapped[int | None] = mapped_column(
        ForeignKey("cdc_location.location_id", ondelete="RESTRICT"),
        nullable=True,
    )

    location: Mapped[CdcLocation | None] = relationship(lazy="joined")

    @property
    def is_active(self) -> bool:
        """Check if the CDC is active."""
        return self.status == "active"
