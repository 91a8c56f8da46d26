# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package.

This package provides the StudentService for enrollment, age-annotated
listings and guardian linkage.
"""

from src.domains.student.service import (
    ParentAlreadyLinkedError,
    ParentNotFoundError,
    StudentExistsError,
    StudentNotFoundError,
    StudentService,
    StudentServiceError,
)

__all__ = [
    "StudentService",
    "StudentServiceError",
    "StudentNotFoundError",
    "StudentExistsError",
    "ParentNotFoundError",
    "ParentAlreadyLinkedError",
]
