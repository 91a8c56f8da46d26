# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Take-home activities, homework uploads and activity submissions."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class ActivityRequest(BaseModel):
    """Request to create or replace a take-home activity in the caller's CDC."""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    due_date: date | None = None
    age_group_id: int | None = None
    file_path: str | None = None


class ActivitySummary(BaseModel):
    """Take-home activity with its catalog age range."""

    model_config = ConfigDict(frozen=True)

    activity_id: int
    title: str
    description: str | None = None
    due_date: date | None = None
    age_group_id: int | None = None
    age_range: str | None = None
    file_path: str | None = None
    tenant_id: int | None = None
    created_at: datetime | None = None


class HomeworkRequest(BaseModel):
    """Homework a parent uploads for their linked child. A file is required."""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    file_path: str = Field(min_length=1)


class HomeworkSummary(BaseModel):
    """Stored homework upload."""

    model_config = ConfigDict(frozen=True)

    homework_id: int
    student_id: str
    tenant_id: int
    title: str
    description: str | None = None
    file_path: str
    uploaded_at: datetime | None = None


class SubmissionRequest(BaseModel):
    """A parent's answer to an activity."""

    activity_id: int
    file_path: str | None = None
    comments: str | None = None


class SubmissionSummary(BaseModel):
    """Stored activity submission."""

    model_config = ConfigDict(frozen=True)

    submission_id: int
    activity_id: int
    student_id: str
    file_path: str | None = None
    comments: str | None = None
    submitted_at: datetime | None = None


class RosterEntry(BaseModel):
    """A student of the activity's CDC and their submission, if any."""

    model_config = ConfigDict(frozen=True)

    student_id: str
    first_name: str
    last_name: str
    submission: SubmissionSummary | None = None
