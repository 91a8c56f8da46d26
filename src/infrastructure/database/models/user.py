# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User account tables."""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """User account.

    ``type`` holds the role. ``password`` holds a hash produced by the
    credential store.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="unassigned", index=True)
    cdc_id: Mapped[int | None] = mapped_column(
        ForeignKey("cdc.cdc_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    other_info: Mapped["UserOtherInfo | None"] = relationship(
        back_populates="user",
        lazy="joined",
        uselist=False,
    )


class UserOtherInfo(Base):
    """Profile details of a user, including the free-text address."""

    __tablename__ = "user_other_info"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    full_name: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50))
    address: Mapped[str | None] = mapped_column(Text)
    organization: Mapped[str | None] = mapped_column(String(255))

    user: Mapped[User] = relationship(back_populates="other_info")
