from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import EventType, NoticePriority


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class StudyMaterial:
    material_id: int
    title: str
    description: Optional[str]
    file_path: Optional[str]
    file_type: Optional[str]
    class_id: int
    uploaded_by: int
    created_at: Optional[datetime] = None
    uploaded_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.material_id,
            "title": self.title,
            "description": self.description,
            "file_path": self.file_path,
            "file_type": self.file_type,
            "class_id": self.class_id,
            "uploaded_by": self.uploaded_by,
            "uploaded_by_name": self.uploaded_by_name,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class Notice:
    notice_id: int
    title: str
    content: str
    priority: NoticePriority
    class_id: int
    created_by: int
    created_at: Optional[datetime] = None
    created_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.notice_id,
            "title": self.title,
            "content": self.content,
            "priority": self.priority.value,
            "class_id": self.class_id,
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class Event:
    event_id: int
    title: str
    description: Optional[str]
    event_type: EventType
    event_date: date
    event_time: Optional[str]
    class_id: int
    created_by: int
    created_at: Optional[datetime] = None
    created_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "title": self.title,
            "description": self.description,
            "event_type": self.event_type.value,
            "event_date": _iso(self.event_date),
            "event_time": self.event_time,
            "class_id": self.class_id,
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class Mark:
    """A student's mark; visible to that student, not to the whole class."""

    mark_id: int
    student_id: int
    subject: str
    exam_type: str
    marks_obtained: int
    total_marks: int
    class_id: int
    created_by: int
    created_at: Optional[datetime] = None
    created_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.mark_id,
            "student_id": self.student_id,
            "subject": self.subject,
            "exam_type": self.exam_type,
            "marks_obtained": self.marks_obtained,
            "total_marks": self.total_marks,
            "class_id": self.class_id,
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "created_at": _iso(self.created_at),
        }
