from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import optional_positive_int, optional_text, require_non_empty
from ..core.enums import Role
from ..core.exceptions import ClassInUseError, NotFoundError, ValidationError
from ..policy.authorization import Action, Actor, Target, enforce
from ..users.model import CurrentUser, User
from ..users.repository import UserRepository
from .model import ClassGroup, ClassSummary
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    """Use case: class membership, scoping and class administration."""

    def __init__(self, classes: ClassRepository, users: UserRepository, resources=None):
        self._classes = classes
        self._users = users
        # ResourceRepository; only needed to clear a class's resources on delete.
        self._resources = resources

    # -- membership -------------------------------------------------------

    def class_of(self, user_id: int) -> Optional[ClassGroup]:
        """The class a principal belongs to, or ``None`` when unassigned."""

        user = self._users.get_by_id(int(user_id))
        if not user or user.class_id is None:
            return None
        return self._classes.get_by_id(user.class_id)

    def actor_for(self, current_user: CurrentUser) -> Actor:
        """Combine token claims with the principal's current class membership."""

        group = self.class_of(current_user.user_id)
        return Actor(
            user_id=current_user.user_id,
            role=current_user.role,
            class_id=group.class_id if group else None,
        )

    def get_my_class(self, current_user: CurrentUser) -> Optional[dict]:
        group = self.class_of(current_user.user_id)
        if not group:
            return None
        teacher = self._users.get_by_id(group.teacher_id) if group.teacher_id else None
        return {
            "id": group.class_id,
            "name": group.name,
            "description": group.description,
            "teacher_id": group.teacher_id,
            "teacher_name": teacher.display_name if teacher else None,
        }

    def list_my_classmates(self, current_user: CurrentUser) -> Sequence[User]:
        group = self.class_of(current_user.user_id)
        if not group:
            return []
        return self._users.list_by_class(group.class_id, role=Role.STUDENT)

    # -- explicit class-id views (admin/teacher) --------------------------

    def list_classes(self, current_user: CurrentUser) -> Sequence[ClassSummary]:
        enforce(self.actor_for(current_user), Action.LIST_CLASSES)
        return self._classes.list_summaries()

    def get_class(self, class_id: int) -> ClassGroup:
        group = self._classes.get_by_id(int(class_id))
        if not group:
            raise NotFoundError("Class not found")
        return group

    def list_students(self, current_user: CurrentUser, class_id: int) -> Sequence[User]:
        enforce(self.actor_for(current_user), Action.QUERY_CLASS_BY_ID, Target(class_id=int(class_id)))
        self.get_class(class_id)
        return self._users.list_by_class(int(class_id), role=Role.STUDENT)

    # -- administration -----------------------------------------------------

    def _validate_teacher(self, teacher_id) -> Optional[int]:
        teacher_id = optional_positive_int(teacher_id, "teacher_id")
        if teacher_id is None:
            return None
        teacher = self._users.get_by_id(teacher_id)
        if not teacher:
            raise NotFoundError("Teacher not found")
        if teacher.role != Role.TEACHER:
            raise ValidationError("teacher_id must reference a teacher")
        return teacher_id

    def create_class(
        self,
        current_user: CurrentUser,
        *,
        name: str,
        description: Optional[str] = None,
        teacher_id=None,
    ) -> int:
        enforce(self.actor_for(current_user), Action.MANAGE_CLASS)
        name = require_non_empty(name, "Class name")
        teacher_id = self._validate_teacher(teacher_id)

        class_id = self._classes.create_class(name=name, description=optional_text(description), teacher_id=teacher_id)
        logger.info("Class %s created by user %s", class_id, current_user.user_id)
        return class_id

    def update_class(
        self,
        current_user: CurrentUser,
        *,
        class_id: int,
        name: str,
        description: Optional[str] = None,
        teacher_id=None,
    ) -> None:
        enforce(self.actor_for(current_user), Action.MANAGE_CLASS)
        name = require_non_empty(name, "Class name")
        teacher_id = self._validate_teacher(teacher_id)

        ok = self._classes.update_class(
            class_id=int(class_id),
            name=name,
            description=optional_text(description),
            teacher_id=teacher_id,
        )
        if not ok:
            raise NotFoundError("Class not found")

    def delete_class(self, current_user: CurrentUser, class_id: int) -> None:
        enforce(self.actor_for(current_user), Action.MANAGE_CLASS)
        self.get_class(class_id)

        if self._users.count_by_class(int(class_id)) > 0:
            raise ClassInUseError("Class still has members assigned")

        if self._resources is not None:
            removed = self._resources.delete_for_class(int(class_id))
            logger.info("Removed %s resource(s) of class %s", removed, class_id)

        if not self._classes.delete_class(int(class_id)):
            raise NotFoundError("Class not found")
        logger.info("Class %s deleted by user %s", class_id, current_user.user_id)
