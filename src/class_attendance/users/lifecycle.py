from __future__ import annotations

import logging

from ..attendance.repository import AttendanceRepository
from ..classes.repository import ClassRepository
from ..core.exceptions import NotFoundError, StoreFailure
from ..policy.authorization import Action, Actor, Target, enforce
from .model import CurrentUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


class PrincipalLifecycleManager:
    """Cascading delete of a principal.

    Phase 1 removes the user's attendance rows and detaches it as the teacher
    of any class, phase 2 removes the user row. The order is fixed: a failure
    after phase 1 leaves an unreferenced but still existing principal, never
    rows pointing at a missing user.
    """

    def __init__(self, users: UserRepository, attendance: AttendanceRepository, classes: ClassRepository):
        self._users = users
        self._attendance = attendance
        self._classes = classes

    def delete_principal(self, current_user: CurrentUser, user_id: int) -> int:
        """Delete ``user_id`` and its attendance; returns the number of attendance rows removed."""

        user_id = int(user_id)
        actor = Actor(user_id=current_user.user_id, role=current_user.role)
        enforce(actor, Action.DELETE_PRINCIPAL, Target(owner_id=user_id))

        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")

        removed = self._attendance.delete_for_user(user_id)
        logger.info("Removed %s attendance record(s) of user %s", removed, user_id)
        detached = self._classes.clear_teacher(user_id)
        if detached:
            logger.info("Detached user %s as teacher of %s class(es)", user_id, detached)

        try:
            deleted = self._users.delete_by_id(user_id)
        except StoreFailure:
            logger.exception("User %s kept after its attendance was removed", user_id)
            raise
        if not deleted:
            raise NotFoundError("User not found")

        logger.info("User %s deleted by admin %s", user_id, current_user.user_id)
        return removed
