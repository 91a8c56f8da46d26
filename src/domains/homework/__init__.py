# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Homework domain package.

This package provides the HomeworkService for parent homework uploads
and activity submissions, and their review by CDC workers.
"""

from src.domains.homework.service import (
    HomeworkService,
    HomeworkServiceError,
    StudentNotFoundError,
    SubmissionExistsError,
    SubmissionNotFoundError,
)

__all__ = [
    "HomeworkService",
    "HomeworkServiceError",
    "StudentNotFoundError",
    "SubmissionExistsError",
    "SubmissionNotFoundError",
]
