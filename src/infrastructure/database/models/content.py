# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Age group catalog and targeted content tables."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin


class AgeGroup(Base):
    """Age band catalog row. ``age_range`` is loosely formatted text."""

    __tablename__ = "age_groups"

    age_group_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    age_range: Mapped[str | None] = mapped_column(String(50))


class Announcement(Base, TimestampMixin):
    """Announcement targeted by age band label, roles and CDC.

    ``cdc_id`` NULL means every CDC. ``role_filter`` is comma-separated.
    """

    __tablename__ = "announcements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    author_name: Mapped[str | None] = mapped_column(String(255))
    age_filter: Mapped[str] = mapped_column(String(20), nullable=False, default="all")
    role_filter: Mapped[str] = mapped_column(String(100), nullable=False)
    cdc_id: Mapped[int | None] = mapped_column(
        ForeignKey("cdc.cdc_id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    attachment_path: Mapped[str | None] = mapped_column(String(500))
    attachment_name: Mapped[str | None] = mapped_column(String(255))


class TakeHomeActivity(Base):
    """Take-home activity targeted at a catalog age group within a CDC."""

    __tablename__ = "take_home_activities"

    activity_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    due_date: Mapped[date | None] = mapped_column(Date)
    file_path: Mapped[str | None] = mapped_column(String(500))
    cdc_id: Mapped[int | None] = mapped_column(
        ForeignKey("cdc.cdc_id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    age_group_id: Mapped[int | None] = mapped_column(
        ForeignKey("age_groups.age_group_id", ondelete="SET NULL"),
        nullable=True,
    )
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    creation_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
