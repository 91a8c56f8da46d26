# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student and student profile tables.

A student is always written together with its four profile rows in one
transaction.
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin


class Student(Base, TimestampMixin):
    """An enrolled child."""

    __tablename__ = "students"

    student_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birthdate: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    gender: Mapped[str | None] = mapped_column(String(20))
    cdc_id: Mapped[int] = mapped_column(
        ForeignKey("cdc.cdc_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )


class ChildOtherInfo(Base):
    """Child address and languages."""

    __tablename__ = "child_other_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    child_address: Mapped[str | None] = mapped_column(Text)
    first_language: Mapped[str | None] = mapped_column(String(50))
    second_language: Mapped[str | None] = mapped_column(String(50))


class GuardianInfo(Base):
    """Guardian details and the link to a parent account."""

    __tablename__ = "guardian_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    guardian_name: Mapped[str] = mapped_column(String(255), nullable=False)
    relationship: Mapped[str | None] = mapped_column(String(50))
    email_address: Mapped[str | None] = mapped_column(String(255))
    phone_num: Mapped[str | None] = mapped_column(String(50))


class MotherInfo(Base):
    """Mother details."""

    __tablename__ = "mother_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mother_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mother_occupation: Mapped[str | None] = mapped_column(String(100))
    mother_address: Mapped[str | None] = mapped_column(Text)
    mother_home_contact: Mapped[str | None] = mapped_column(String(50))
    mother_work_contact: Mapped[str | None] = mapped_column(String(50))


class FatherInfo(Base):
    """Father details."""

    __tablename__ = "father_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    father_name: Mapped[str] = mapped_column(String(255), nullable=False)
    father_occupation: Mapped[str | None] = mapped_column(String(100))
    father_address: Mapped[str | None] = mapped_column(Text)
    father_home_contact: Mapped[str | None] = mapped_column(String(50))
    father_work_contact: Mapped[str | None] = mapped_column(String(50))
