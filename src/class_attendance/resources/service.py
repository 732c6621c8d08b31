from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..classes.service import ClassService
from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_positive_int, optional_text, require_non_empty, require_positive_int
from ..core.enums import EventType, NoticePriority, ResourceKind, Role
from ..core.exceptions import NotFoundError, NotInClassError, StoreFailure, ValidationError
from ..policy.authorization import Action, Actor, Target, enforce
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .model import Event, Mark, Notice, StudyMaterial
from .repository import ResourceRepository
from .storage import FileStore

logger = logging.getLogger(__name__)


class ResourceService:
    """Use case: class-scoped materials, notices, events and marks.

    Listing without an explicit class id returns the caller's own class only
    (empty when the caller has no class). An explicit class id is a privileged
    cross-class view checked by the policy.
    """

    def __init__(
        self,
        resources: ResourceRepository,
        users: UserRepository,
        class_service: ClassService,
        *,
        file_store: Optional[FileStore] = None,
    ):
        self._resources = resources
        self._users = users
        self._class_service = class_service
        self._files = file_store

    # -- scoping ----------------------------------------------------------------

    def _read_scope(self, actor: Actor, class_id) -> Optional[int]:
        class_id = optional_positive_int(class_id, "class_id")
        if class_id is None:
            return actor.class_id
        enforce(actor, Action.QUERY_CLASS_BY_ID, Target(class_id=class_id))
        self._class_service.get_class(class_id)
        return class_id

    def _create_scope(self, actor: Actor, class_id) -> int:
        explicit = optional_positive_int(class_id, "class_id")
        target_class = explicit if explicit is not None else actor.class_id

        enforce(actor, Action.CREATE_RESOURCE, Target(class_id=target_class))
        if target_class is None:
            raise NotInClassError("User is not assigned to a class")
        self._class_service.get_class(target_class)
        return target_class

    def list_resources(self, kind: ResourceKind, current_user: CurrentUser, class_id=None) -> Sequence:
        if kind == ResourceKind.MARK:
            return self.list_marks(current_user, class_id=class_id)

        actor = self._class_service.actor_for(current_user)
        scope = self._read_scope(actor, class_id)
        if scope is None:
            return []
        if kind == ResourceKind.MATERIAL:
            return self._resources.list_materials(scope)
        if kind == ResourceKind.NOTICE:
            return self._resources.list_notices(scope)
        if kind == ResourceKind.EVENT:
            return self._resources.list_events(scope)
        raise ValidationError(f"Unknown resource kind: {kind}")

    def list_materials(self, current_user: CurrentUser, class_id=None) -> Sequence[StudyMaterial]:
        return self.list_resources(ResourceKind.MATERIAL, current_user, class_id)

    def list_notices(self, current_user: CurrentUser, class_id=None) -> Sequence[Notice]:
        return self.list_resources(ResourceKind.NOTICE, current_user, class_id)

    def list_events(self, current_user: CurrentUser, class_id=None) -> Sequence[Event]:
        return self.list_resources(ResourceKind.EVENT, current_user, class_id)

    def material_for_file(self, current_user: CurrentUser, filename: str) -> StudyMaterial:
        """The material an uploaded file belongs to, if the caller may read that class."""

        material = self._resources.get_material_by_file(filename)
        if not material:
            raise NotFoundError("File not found")
        actor = self._class_service.actor_for(current_user)
        if actor.class_id != material.class_id:
            enforce(actor, Action.QUERY_CLASS_BY_ID, Target(class_id=material.class_id))
        return material

    # -- creation -----------------------------------------------------------------

    def create_material(
        self,
        current_user: CurrentUser,
        *,
        title: str,
        description: Optional[str] = None,
        file_type: Optional[str] = None,
        upload=None,
        class_id=None,
    ) -> int:
        actor = self._class_service.actor_for(current_user)
        target_class = self._create_scope(actor, class_id)
        title = require_non_empty(title, "Title")

        file_path = None
        final_type = optional_text(file_type) or "document"
        if upload is not None and getattr(upload, "filename", None):
            if self._files is None:
                raise ValidationError("File uploads are not configured")
            stored = self._files.save(upload)
            file_path, final_type = stored.filename, stored.extension

        try:
            material_id = self._resources.create_material(
                title=title,
                description=optional_text(description),
                file_path=file_path,
                file_type=final_type,
                class_id=target_class,
                uploaded_by=current_user.user_id,
            )
        except StoreFailure:
            if file_path and self._files is not None:
                self._files.delete(file_path)
            raise

        logger.info("Material %s added to class %s by user %s", material_id, target_class, current_user.user_id)
        return material_id

    def create_notice(
        self,
        current_user: CurrentUser,
        *,
        title: str,
        content: str,
        priority: Optional[str] = None,
        class_id=None,
    ) -> int:
        actor = self._class_service.actor_for(current_user)
        target_class = self._create_scope(actor, class_id)
        if not title or not content:
            raise ValidationError("Title and content are required")

        try:
            level = NoticePriority(priority or NoticePriority.NORMAL)
        except ValueError:
            raise ValidationError("Invalid priority")

        notice_id = self._resources.create_notice(
            title=require_non_empty(title, "Title"),
            content=require_non_empty(content, "Content"),
            priority=level,
            class_id=target_class,
            created_by=current_user.user_id,
        )
        logger.info("Notice %s added to class %s by user %s", notice_id, target_class, current_user.user_id)
        return notice_id

    def create_event(
        self,
        current_user: CurrentUser,
        *,
        title: str,
        event_date,
        description: Optional[str] = None,
        event_type: Optional[str] = None,
        event_time: Optional[str] = None,
        class_id=None,
    ) -> int:
        actor = self._class_service.actor_for(current_user)
        target_class = self._create_scope(actor, class_id)
        if not title or not event_date:
            raise ValidationError("Title and event date are required")

        if not isinstance(event_date, date):
            try:
                event_date = parse_iso_date(str(event_date))
            except ValueError:
                raise ValidationError("Event date must be YYYY-MM-DD")

        try:
            kind = EventType(event_type or EventType.EVENT)
        except ValueError:
            raise ValidationError("Invalid event type")

        event_id = self._resources.create_event(
            title=require_non_empty(title, "Title"),
            description=optional_text(description),
            event_type=kind,
            event_date=event_date,
            event_time=optional_text(event_time),
            class_id=target_class,
            created_by=current_user.user_id,
        )
        logger.info("Event %s added to class %s by user %s", event_id, target_class, current_user.user_id)
        return event_id

    # -- marks ----------------------------------------------------------------------

    def create_mark(
        self,
        current_user: CurrentUser,
        *,
        student_id,
        subject: str,
        exam_type: str,
        marks_obtained,
        total_marks,
    ) -> int:
        actor = self._class_service.actor_for(current_user)
        if student_id in (None, "") or not subject or not exam_type or marks_obtained in (None, "") or not total_marks:
            raise ValidationError("All fields are required")

        student_id = require_positive_int(student_id, "student_id")
        student = self._users.get_by_id(student_id)
        student_class = student.class_id if student else None
        enforce(
            actor,
            Action.CREATE_MARK,
            Target(owner_id=student_id, owner_class_id=student_class, class_id=student_class),
        )

        if not student:
            raise NotFoundError("Student not found")
        if student.role != Role.STUDENT:
            raise ValidationError("Marks can only be given to students")
        if student_class is None:
            raise NotInClassError("Student is not assigned to a class")

        total = require_positive_int(total_marks, "total_marks")
        try:
            obtained = int(marks_obtained)
        except (TypeError, ValueError):
            raise ValidationError("marks_obtained must be a number")
        if obtained < 0 or obtained > total:
            raise ValidationError("marks_obtained must be between 0 and total_marks")

        mark_id = self._resources.create_mark(
            student_id=student_id,
            subject=require_non_empty(subject, "Subject"),
            exam_type=require_non_empty(exam_type, "Exam type"),
            marks_obtained=obtained,
            total_marks=total,
            class_id=student_class,
            created_by=current_user.user_id,
        )
        logger.info("Mark %s for student %s added by user %s", mark_id, student_id, current_user.user_id)
        return mark_id

    def list_marks(self, current_user: CurrentUser, *, student_id=None, class_id=None) -> Sequence[Mark]:
        """Marks about ``student_id``, a whole class, or (by default) the caller."""

        actor = self._class_service.actor_for(current_user)
        student_id = optional_positive_int(student_id, "student_id")
        class_id = optional_positive_int(class_id, "class_id")

        if student_id is not None and student_id != current_user.user_id:
            student = self._users.get_by_id(student_id)
            enforce(
                actor,
                Action.READ_MARKS,
                Target(owner_id=student_id, owner_class_id=student.class_id if student else None),
            )
            if not student:
                raise NotFoundError("Student not found")
            return self._resources.list_marks(student_id=student_id)

        if class_id is not None:
            enforce(actor, Action.READ_MARKS, Target(class_id=class_id))
            self._class_service.get_class(class_id)
            return self._resources.list_marks(class_id=class_id)

        enforce(actor, Action.READ_MARKS, Target(owner_id=current_user.user_id, owner_class_id=actor.class_id))
        return self._resources.list_marks(student_id=current_user.user_id)
