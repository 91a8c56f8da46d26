# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Targeted content models: announcements, classwork and take-home activities."""

from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.common import (
    ALL_AGES,
    CANONICAL_BAND_LABELS,
    TARGETABLE_ROLES,
    ContentKind,
    Role,
)


def parse_role_filter(value: object, allowed: Iterable[Role] | None = None) -> frozenset[Role]:
    """Parse a stored or submitted role filter.

    Accepts a comma-separated string or an iterable of role names.
    Unknown roles, and roles outside ``allowed`` when given, are dropped.

    Args:
        value: Raw role filter.
        allowed: Roles that may be kept.

    Returns:
        Set of roles, possibly empty.
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, Iterable):
        raw = list(value)
    else:
        raw = [value]

    roles = {Role.parse(item) for item in raw if str(item).strip()}
    roles.discard(Role.UNASSIGNED)
    if allowed is not None:
        roles &= set(allowed)
    return frozenset(roles)


def role_filter_to_text(roles: Iterable[Role]) -> str:
    """Serialize a role filter for storage, in a stable order."""
    return ",".join(sorted(role.value for role in roles))


def parse_age_filter(value: object) -> int | str:
    """Normalize a stored age filter.

    Empty values mean every age. Numeric strings are catalog ids.
    """
    if value is None:
        return ALL_AGES
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return ALL_AGES
    if text.isdigit():
        return int(text)
    return text.lower() if text.lower() == ALL_AGES else text


class ContentItem(BaseModel):
    """A piece of targeted content.

    Attributes:
        id: Content identifier.
        kind: Announcement, classwork or activity.
        tenant_id: Owning CDC; None means every CDC (broadcast).
        age_filter: Age band id, or ``"all"``.
        role_filter: Roles the item targets. Never empty.
        created_at: Creation time.
        title: Title shown to viewers.
        body: Message text.
        attachment_path: Opaque blob-store path.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    kind: ContentKind = ContentKind.ANNOUNCEMENT
    tenant_id: int | None = None
    age_filter: int | str = ALL_AGES
    role_filter: frozenset[Role]
    created_at: datetime | None = None
    title: str = ""
    body: str | None = None
    attachment_path: str | None = None

    @field_validator("role_filter", mode="before")
    @classmethod
    def validate_role_filter(cls, value: object) -> frozenset[Role]:
        """Parse the role filter and require at least one role."""
        roles = parse_role_filter(value)
        if not roles:
            raise ValueError("role_filter must target at least one role")
        return roles

    @field_validator("age_filter", mode="before")
    @classmethod
    def validate_age_filter(cls, value: object) -> int | str:
        """Normalize the age filter."""
        return parse_age_filter(value)


class AnnouncementCreateRequest(BaseModel):
    """Request to publish an announcement in the caller's CDC.

    The target CDC is never taken from the request; it comes from the
    publishing actor's scope.
    """

    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    age_filter: str
    role_filter: frozenset[Role]
    attachment_path: str | None = None
    attachment_name: str | None = None

    @field_validator("age_filter", mode="before")
    @classmethod
    def validate_age_filter(cls, value: object) -> str:
        """Allow only ``all`` and the canonical band labels."""
        text = str(value or "").strip()
        if text != ALL_AGES and text not in CANONICAL_BAND_LABELS:
            raise ValueError(f"age_filter must be one of: all, {', '.join(CANONICAL_BAND_LABELS)}")
        return text

    @field_validator("role_filter", mode="before")
    @classmethod
    def validate_role_filter(cls, value: object) -> frozenset[Role]:
        """Keep only targetable roles and require at least one."""
        roles = parse_role_filter(value, allowed=TARGETABLE_ROLES)
        if not roles:
            raise ValueError("at least one target role is required")
        return roles


class PublishFailure(BaseModel):
    """A CDC an announcement could not be published to, and why."""

    model_config = ConfigDict(frozen=True)

    tenant_id: int
    reason: str


class PublishResult(BaseModel):
    """Outcome of publishing one announcement to several CDCs.

    Attributes:
        created: One item per CDC published to.
        failures: CDCs that were refused or do not exist.
    """

    created: list[ContentItem] = Field(default_factory=list)
    failures: list[PublishFailure] = Field(default_factory=list)
