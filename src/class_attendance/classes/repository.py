from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassGroup, ClassSummary


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[ClassGroup]:
        raise NotImplementedError

    def list_summaries(self) -> Sequence[ClassSummary]:
        raise NotImplementedError

    def create_class(self, *, name: str, description: Optional[str], teacher_id: Optional[int]) -> int:
        raise NotImplementedError

    def update_class(self, *, class_id: int, name: str, description: Optional[str], teacher_id: Optional[int]) -> bool:
        raise NotImplementedError

    def delete_class(self, class_id: int) -> bool:
        raise NotImplementedError

    def clear_teacher(self, teacher_id: int) -> int:
        """Detach ``teacher_id`` from every class it leads; returns the number of classes touched."""
        raise NotImplementedError
