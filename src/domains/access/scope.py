# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Role x operation authorization.

authorize() is the single decision point for every scoped read or write.
It is pure: the caller resolves the actor and re-derives the target from
stored records first (see AccessService), then asks for a decision.

Decision table:

    president   users r/w, content r/w/delete               own CDC
    admin       president's operations + create_president   own CDC
    worker      students, attendance, activities r/w;       own CDC
                read content
    parent      view child, child content, submit homework  linked child
    focal       read content                                municipality/province
    msw         view aggregates (read only)                 unrestricted
    unassigned  nothing

Example:
    >>> decision = authorize(actor, Operation.READ_STUDENTS, target)
    >>> if isinstance(decision, Deny):
    ...     raise AccessDeniedError(decision)
"""

from dataclasses import dataclass
from enum import Enum

from src.models.common import Role, TenantStatus
from src.models.person import Geography


class Operation(str, Enum):
    """Operations that need an authorization decision."""

    READ_USERS = "read_users"
    MANAGE_USERS = "manage_users"
    CREATE_PRESIDENT = "create_president"
    READ_CONTENT = "read_content"
    PUBLISH_CONTENT = "publish_content"
    DELETE_CONTENT = "delete_content"
    READ_STUDENTS = "read_students"
    MANAGE_STUDENTS = "manage_students"
    READ_ATTENDANCE = "read_attendance"
    RECORD_ATTENDANCE = "record_attendance"
    READ_ACTIVITIES = "read_activities"
    MANAGE_ACTIVITIES = "manage_activities"
    VIEW_CHILD = "view_child"
    VIEW_CHILD_CONTENT = "view_child_content"
    SUBMIT_HOMEWORK = "submit_homework"
    VIEW_AGGREGATES = "view_aggregates"

    @property
    def is_write(self) -> bool:
        """Check if the operation modifies data."""
        return self in _WRITE_OPERATIONS

    @property
    def is_child_scoped(self) -> bool:
        """Check if the operation acts on a parent's linked child."""
        return self in _CHILD_OPERATIONS


_WRITE_OPERATIONS = frozenset({
    Operation.MANAGE_USERS,
    Operation.CREATE_PRESIDENT,
    Operation.PUBLISH_CONTENT,
    Operation.DELETE_CONTENT,
    Operation.MANAGE_STUDENTS,
    Operation.RECORD_ATTENDANCE,
    Operation.MANAGE_ACTIVITIES,
    Operation.SUBMIT_HOMEWORK,
})

_CHILD_OPERATIONS = frozenset({
    Operation.VIEW_CHILD,
    Operation.VIEW_CHILD_CONTENT,
    Operation.SUBMIT_HOMEWORK,
})

_PRESIDENT_OPERATIONS = frozenset({
    Operation.READ_USERS,
    Operation.MANAGE_USERS,
    Operation.READ_CONTENT,
    Operation.PUBLISH_CONTENT,
    Operation.DELETE_CONTENT,
})

PERMISSIONS: dict[Role, frozenset[Operation]] = {
    Role.PRESIDENT: _PRESIDENT_OPERATIONS,
    Role.ADMIN: _PRESIDENT_OPERATIONS | {Operation.CREATE_PRESIDENT},
    Role.WORKER: frozenset({
        Operation.READ_STUDENTS,
        Operation.MANAGE_STUDENTS,
        Operation.READ_ATTENDANCE,
        Operation.RECORD_ATTENDANCE,
        Operation.READ_ACTIVITIES,
        Operation.MANAGE_ACTIVITIES,
        Operation.READ_CONTENT,
    }),
    Role.PARENT: _CHILD_OPERATIONS,
    Role.FOCAL: frozenset({Operation.READ_CONTENT}),
    Role.MSW: frozenset({Operation.VIEW_AGGREGATES}),
}


class DenyReason(str, Enum):
    """Which rule refused the operation."""

    UNAUTHENTICATED_ROLE = "unauthenticated-role"
    ROLE_NOT_PERMITTED = "role-not-permitted"
    MISSING_TENANT = "missing-tenant"
    CROSS_TENANT = "cross-tenant"
    DEACTIVATED_TENANT = "deactivated-tenant"
    NO_LINKED_STUDENT = "no-linked-student"
    FOREIGN_STUDENT = "foreign-student"
    MISSING_GEOGRAPHY = "missing-geography"
    OUTSIDE_GEOGRAPHY = "outside-geography"


@dataclass(frozen=True)
class TenantScope:
    """Access restricted to one CDC."""

    tenant_id: int


@dataclass(frozen=True)
class ChildScope:
    """Access restricted to a parent's linked child."""

    tenant_id: int
    student_id: str


@dataclass(frozen=True)
class GeographyScope:
    """Access restricted to CDCs in one municipality and province."""

    municipality: str
    province: str


@dataclass(frozen=True)
class Unrestricted:
    """Read-only access across every active CDC."""


Scope = TenantScope | ChildScope | GeographyScope | Unrestricted


@dataclass(frozen=True)
class Allow:
    """Operation permitted within a scope."""

    scope: Scope


@dataclass(frozen=True)
class Deny:
    """Operation refused."""

    reason: DenyReason


AccessDecision = Allow | Deny


@dataclass(frozen=True)
class Actor:
    """Caller identity re-resolved against the data store for one operation.

    Attributes:
        user_id: Account id.
        role: Account role as stored.
        tenant_id: Home CDC, if any.
        tenant_status: Current status of the home CDC.
        linked_student_id: Parent's linked child.
        linked_student_tenant_id: CDC of the linked child.
        linked_student_tenant_status: Current status of that CDC.
        geography: Place of a geography-scoped actor, if resolvable.
    """

    user_id: int
    role: Role
    tenant_id: int | None = None
    tenant_status: TenantStatus | None = None
    linked_student_id: str | None = None
    linked_student_tenant_id: int | None = None
    linked_student_tenant_status: TenantStatus | None = None
    geography: Geography | None = None


@dataclass(frozen=True)
class AccessTarget:
    """Record an operation acts on, re-derived from storage.

    Attributes:
        tenant_id: CDC owning the record.
        tenant_status: Current status of that CDC.
        student_id: Child the record belongs to, for child-scoped records.
        location: Location of the owning CDC, for geography checks.
    """

    tenant_id: int | None = None
    tenant_status: TenantStatus | None = None
    student_id: str | None = None
    location: Geography | None = None


class AccessDeniedError(Exception):
    """Raised when an operation is refused.

    The message never says whether the target exists.
    """

    def __init__(self, decision: Deny) -> None:
        super().__init__("not authorized")
        self.reason = decision.reason


def _target_deactivated(target: AccessTarget | None) -> bool:
    return target is not None and target.tenant_status == TenantStatus.DEACTIVATED


def _authorize_tenant_role(actor: Actor, target: AccessTarget | None) -> AccessDecision:
    if actor.tenant_id is None:
        return Deny(DenyReason.MISSING_TENANT)
    if actor.tenant_status != TenantStatus.ACTIVE:
        return Deny(DenyReason.DEACTIVATED_TENANT)
    if target is not None and target.tenant_id is not None and target.tenant_id != actor.tenant_id:
        return Deny(DenyReason.CROSS_TENANT)
    if _target_deactivated(target):
        return Deny(DenyReason.DEACTIVATED_TENANT)
    return Allow(TenantScope(actor.tenant_id))


def _authorize_parent(actor: Actor, target: AccessTarget | None) -> AccessDecision:
    if actor.linked_student_id is None or actor.linked_student_tenant_id is None:
        return Deny(DenyReason.NO_LINKED_STUDENT)
    if target is not None:
        if target.student_id is not None and target.student_id != actor.linked_student_id:
            return Deny(DenyReason.FOREIGN_STUDENT)
        if target.tenant_id is not None and target.tenant_id != actor.linked_student_tenant_id:
            return Deny(DenyReason.CROSS_TENANT)
    if actor.linked_student_tenant_status != TenantStatus.ACTIVE:
        return Deny(DenyReason.DEACTIVATED_TENANT)
    if _target_deactivated(target):
        return Deny(DenyReason.DEACTIVATED_TENANT)
    return Allow(ChildScope(actor.linked_student_tenant_id, actor.linked_student_id))


def _authorize_focal(actor: Actor, target: AccessTarget | None) -> AccessDecision:
    if actor.geography is None:
        return Deny(DenyReason.MISSING_GEOGRAPHY)
    if target is not None and target.tenant_id is not None:
        if target.location is None or not actor.geography.same_locale(target.location):
            return Deny(DenyReason.OUTSIDE_GEOGRAPHY)
    if _target_deactivated(target):
        return Deny(DenyReason.DEACTIVATED_TENANT)
    return Allow(GeographyScope(actor.geography.municipality, actor.geography.province))


def authorize(
    actor: Actor,
    operation: Operation,
    target: AccessTarget | None = None,
) -> AccessDecision:
    """Decide whether an actor may perform an operation on a target.

    Pure and idempotent: identical inputs always give identical decisions.

    Args:
        actor: Caller as re-resolved for this operation.
        operation: Requested operation.
        target: Record acted on, if any, re-derived from storage.

    Returns:
        Allow with the scope to apply, or Deny with the failed rule.
    """
    permitted = PERMISSIONS.get(actor.role)
    if permitted is None:
        return Deny(DenyReason.UNAUTHENTICATED_ROLE)
    if operation not in permitted:
        return Deny(DenyReason.ROLE_NOT_PERMITTED)

    if actor.role == Role.PARENT:
        return _authorize_parent(actor, target)
    if actor.role == Role.FOCAL:
        return _authorize_focal(actor, target)
    if actor.role == Role.MSW:
        if _target_deactivated(target):
            return Deny(DenyReason.DEACTIVATED_TENANT)
        return Allow(Unrestricted())
    return _authorize_tenant_role(actor, target)
