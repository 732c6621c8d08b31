from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ClassGroup:
    """Domain entity: the scoping unit binding students, a teacher and class resources."""

    class_id: int
    name: str
    description: Optional[str] = None
    teacher_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ClassSummary:
    """Read-model for class listings (joined teacher name and student count)."""

    class_id: int
    name: str
    description: Optional[str]
    teacher_id: Optional[int]
    teacher_name: Optional[str]
    student_count: int

    def to_dict(self) -> dict:
        return {
            "id": self.class_id,
            "name": self.name,
            "description": self.description,
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "student_count": self.student_count,
        }
