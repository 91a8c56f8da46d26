# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Focal person domain package."""

from src.domains.focal.service import (
    FocalExistsError,
    FocalService,
    FocalServiceError,
    UsernameTakenError,
)

__all__ = [
    "FocalService",
    "FocalServiceError",
    "FocalExistsError",
    "UsernameTakenError",
]
