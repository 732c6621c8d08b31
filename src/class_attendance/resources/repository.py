from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import EventType, NoticePriority
from .model import Event, Mark, Notice, StudyMaterial


class ResourceRepository(Protocol):
    """Storage for class-scoped resources (materials, notices, events, marks)."""

    def list_materials(self, class_id: int) -> Sequence[StudyMaterial]:
        raise NotImplementedError

    def create_material(
        self,
        *,
        title: str,
        description: Optional[str],
        file_path: Optional[str],
        file_type: Optional[str],
        class_id: int,
        uploaded_by: int,
    ) -> int:
        raise NotImplementedError

    def get_material_by_file(self, file_path: str) -> Optional[StudyMaterial]:
        raise NotImplementedError

    def list_notices(self, class_id: int) -> Sequence[Notice]:
        raise NotImplementedError

    def create_notice(
        self,
        *,
        title: str,
        content: str,
        priority: NoticePriority,
        class_id: int,
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def list_events(self, class_id: int) -> Sequence[Event]:
        raise NotImplementedError

    def create_event(
        self,
        *,
        title: str,
        description: Optional[str],
        event_type: EventType,
        event_date: date,
        event_time: Optional[str],
        class_id: int,
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def list_marks(self, *, student_id: Optional[int] = None, class_id: Optional[int] = None) -> Sequence[Mark]:
        raise NotImplementedError

    def create_mark(
        self,
        *,
        student_id: int,
        subject: str,
        exam_type: str,
        marks_obtained: int,
        total_marks: int,
        class_id: int,
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def delete_for_class(self, class_id: int) -> int:
        raise NotImplementedError
