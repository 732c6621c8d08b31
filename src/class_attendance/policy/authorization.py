from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from ..core.enums import Role
from ..core.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    CHECK_SELF = "check_self"
    READ_OWN_ATTENDANCE = "read_own_attendance"
    READ_USER_ATTENDANCE = "read_user_attendance"
    READ_ALL_ATTENDANCE = "read_all_attendance"
    READ_CLASS_ATTENDANCE = "read_class_attendance"
    DELETE_ATTENDANCE = "delete_attendance"
    BULK_DELETE_ATTENDANCE = "bulk_delete_attendance"
    MANAGE_CLASS = "manage_class"
    LIST_CLASSES = "list_classes"
    QUERY_CLASS_BY_ID = "query_class_by_id"
    CREATE_RESOURCE = "create_resource"
    CREATE_MARK = "create_mark"
    READ_MARKS = "read_marks"
    LIST_USERS = "list_users"
    DELETE_PRINCIPAL = "delete_principal"


@dataclass(frozen=True)
class Actor:
    """The acting principal with its class resolved from storage."""

    user_id: int
    role: Role
    class_id: Optional[int] = None


@dataclass(frozen=True)
class Target:
    """What an action touches.

    ``owner_id``/``owner_class_id`` describe the user owning the record (or the
    student a mark is about); ``class_id`` is the class the action is scoped to.
    """

    owner_id: Optional[int] = None
    owner_class_id: Optional[int] = None
    class_id: Optional[int] = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def _deny(reason: str) -> Decision:
    return Decision(False, reason)


def _same_class(actor: Actor, class_id: Optional[int]) -> bool:
    return actor.class_id is not None and class_id is not None and actor.class_id == class_id


def _anyone(actor: Actor, target: Target) -> Decision:
    return ALLOW


def _admin_only(actor: Actor, target: Target) -> Decision:
    return ALLOW if actor.role == Role.ADMIN else _deny("Admin access required")


def _admin_or_teacher(actor: Actor, target: Target) -> Decision:
    if actor.role in (Role.ADMIN, Role.TEACHER):
        return ALLOW
    return _deny("Admin or teacher access required")


def _read_user_attendance(actor: Actor, target: Target) -> Decision:
    if actor.role == Role.ADMIN or target.owner_id == actor.user_id:
        return ALLOW
    if actor.role == Role.TEACHER and _same_class(actor, target.owner_class_id):
        return ALLOW
    return _deny("You can only view attendance you are responsible for")


def _read_class_attendance(actor: Actor, target: Target) -> Decision:
    if actor.role == Role.ADMIN:
        return ALLOW
    if actor.role == Role.TEACHER and _same_class(actor, target.class_id):
        return ALLOW
    return _deny("You can only view attendance of your own class")


def _delete_attendance(actor: Actor, target: Target) -> Decision:
    if actor.role == Role.ADMIN or (target.owner_id is not None and target.owner_id == actor.user_id):
        return ALLOW
    return _deny("Access denied")


def _create_in_own_class(actor: Actor, target: Target) -> Decision:
    if actor.role == Role.ADMIN:
        return ALLOW
    if actor.role == Role.TEACHER:
        if _same_class(actor, target.class_id):
            return ALLOW
        return _deny("Teachers can only publish to their own class")
    return _deny("Teacher access required")


def _read_marks(actor: Actor, target: Target) -> Decision:
    if actor.role == Role.ADMIN or (target.owner_id is not None and target.owner_id == actor.user_id):
        return ALLOW
    if actor.role == Role.TEACHER:
        if _same_class(actor, target.owner_class_id if target.owner_id is not None else target.class_id):
            return ALLOW
        return _deny("Teachers can only view marks of their own class")
    return _deny("Students can only view their own marks")


def _delete_principal(actor: Actor, target: Target) -> Decision:
    if actor.role != Role.ADMIN:
        return _deny("Admin access required")
    if target.owner_id == actor.user_id:
        return _deny("Cannot delete your own account")
    return ALLOW


_RULES: Dict[Action, Callable[[Actor, Target], Decision]] = {
    Action.CHECK_SELF: _anyone,
    Action.READ_OWN_ATTENDANCE: _anyone,
    Action.READ_USER_ATTENDANCE: _read_user_attendance,
    Action.READ_ALL_ATTENDANCE: _admin_only,
    Action.READ_CLASS_ATTENDANCE: _read_class_attendance,
    Action.DELETE_ATTENDANCE: _delete_attendance,
    Action.BULK_DELETE_ATTENDANCE: _admin_only,
    Action.MANAGE_CLASS: _admin_only,
    Action.LIST_CLASSES: _admin_or_teacher,
    Action.QUERY_CLASS_BY_ID: _admin_or_teacher,
    Action.CREATE_RESOURCE: _create_in_own_class,
    Action.CREATE_MARK: _create_in_own_class,
    Action.READ_MARKS: _read_marks,
    Action.LIST_USERS: _admin_only,
    Action.DELETE_PRINCIPAL: _delete_principal,
}


def decide(actor: Actor, action: Action, target: Target | None = None) -> Decision:
    """Pure policy lookup: may ``actor`` perform ``action`` on ``target``?"""

    rule = _RULES.get(action)
    if rule is None:
        return _deny(f"Unknown action: {action}")
    return rule(actor, target or Target())


def enforce(actor: Actor, action: Action, target: Target | None = None) -> None:
    """Raise ``ForbiddenError`` with the denial reason if ``decide`` says no."""

    decision = decide(actor, action, target)
    if not decision.allowed:
        logger.info("Denied %s for user %s (%s): %s", action.value, actor.user_id, actor.role.value, decision.reason)
        raise ForbiddenError(decision.reason)
