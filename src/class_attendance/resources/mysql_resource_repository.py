from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import EventType, NoticePriority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event, Mark, Notice, StudyMaterial
from .repository import ResourceRepository


def _creator_name(r: Dict[str, Any]) -> Optional[str]:
    name = " ".join(p for p in (r.get("creator_first_name"), r.get("creator_last_name")) if p)
    return name or r.get("creator_username")


_CREATOR_COLUMNS = "u.first_name AS creator_first_name, u.last_name AS creator_last_name, u.username AS creator_username"


def _to_material(r: Dict[str, Any]) -> StudyMaterial:
    return StudyMaterial(
        material_id=int(r["material_id"]),
        title=r["title"],
        description=r.get("description"),
        file_path=r.get("file_path"),
        file_type=r.get("file_type"),
        class_id=int(r["class_id"]),
        uploaded_by=int(r["uploaded_by"]),
        created_at=r.get("created_at"),
        uploaded_by_name=_creator_name(r),
    )


class MySQLResourceRepository(ResourceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -- study materials ------------------------------------------------------

    def list_materials(self, class_id: int) -> Sequence[StudyMaterial]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT sm.material_id, sm.title, sm.description, sm.file_path, sm.file_type,
                       sm.class_id, sm.uploaded_by, sm.created_at, {_CREATOR_COLUMNS}
                FROM study_materials sm
                LEFT JOIN users u ON u.user_id = sm.uploaded_by
                WHERE sm.class_id=%s
                ORDER BY sm.created_at DESC
                """,
                (int(class_id),),
            )
            return [_to_material(r) for r in fetchall(cur)]

    def get_material_by_file(self, file_path: str) -> Optional[StudyMaterial]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT sm.material_id, sm.title, sm.description, sm.file_path, sm.file_type,
                       sm.class_id, sm.uploaded_by, sm.created_at, {_CREATOR_COLUMNS}
                FROM study_materials sm
                LEFT JOIN users u ON u.user_id = sm.uploaded_by
                WHERE sm.file_path=%s
                """,
                (file_path,),
            )
            r = fetchone(cur)
            return _to_material(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO study_materials(title, description, file_path, file_type, class_id, uploaded_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (title, description, file_path, file_type, int(class_id), int(uploaded_by)),
            )
            return int(cur.lastrowid)

    # -- notices --------------------------------------------------------------

    def list_notices(self, class_id: int) -> Sequence[Notice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT n.notice_id, n.title, n.content, n.priority, n.class_id, n.created_by, n.created_at,
                       {_CREATOR_COLUMNS}
                FROM notices n
                LEFT JOIN users u ON u.user_id = n.created_by
                WHERE n.class_id=%s
                ORDER BY n.created_at DESC
                """,
                (int(class_id),),
            )
            return [
                Notice(
                    notice_id=int(r["notice_id"]),
                    title=r["title"],
                    content=r["content"],
                    priority=NoticePriority(r["priority"]),
                    class_id=int(r["class_id"]),
                    created_by=int(r["created_by"]),
                    created_at=r.get("created_at"),
                    created_by_name=_creator_name(r),
                )
                for r in fetchall(cur)
            ]

    def create_notice(
        self,
        *,
        title: str,
        content: str,
        priority: NoticePriority,
        class_id: int,
        created_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO notices(title, content, priority, class_id, created_by) VALUES(%s,%s,%s,%s,%s)",
                (title, content, priority.value, int(class_id), int(created_by)),
            )
            return int(cur.lastrowid)

    # -- events ---------------------------------------------------------------

    def list_events(self, class_id: int) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT e.event_id, e.title, e.description, e.event_type, e.event_date, e.event_time,
                       e.class_id, e.created_by, e.created_at, {_CREATOR_COLUMNS}
                FROM events e
                LEFT JOIN users u ON u.user_id = e.created_by
                WHERE e.class_id=%s
                ORDER BY e.event_date ASC
                """,
                (int(class_id),),
            )
            return [
                Event(
                    event_id=int(r["event_id"]),
                    title=r["title"],
                    description=r.get("description"),
                    event_type=EventType(r["event_type"]),
                    event_date=r["event_date"],
                    event_time=r.get("event_time"),
                    class_id=int(r["class_id"]),
                    created_by=int(r["created_by"]),
                    created_at=r.get("created_at"),
                    created_by_name=_creator_name(r),
                )
                for r in fetchall(cur)
            ]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(title, description, event_type, event_date, event_time, class_id, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (title, description, event_type.value, event_date, event_time, int(class_id), int(created_by)),
            )
            return int(cur.lastrowid)

    # -- marks ----------------------------------------------------------------

    def list_marks(self, *, student_id: Optional[int] = None, class_id: Optional[int] = None) -> Sequence[Mark]:
        clauses: list[str] = []
        params: list[object] = []
        if student_id is not None:
            clauses.append("m.student_id=%s")
            params.append(int(student_id))
        if class_id is not None:
            clauses.append("m.class_id=%s")
            params.append(int(class_id))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT m.mark_id, m.student_id, m.subject, m.exam_type, m.marks_obtained, m.total_marks,
                       m.class_id, m.created_by, m.created_at, {_CREATOR_COLUMNS}
                FROM student_marks m
                LEFT JOIN users u ON u.user_id = m.created_by
                {where}
                ORDER BY m.created_at DESC
                """,
                tuple(params),
            )
            return [
                Mark(
                    mark_id=int(r["mark_id"]),
                    student_id=int(r["student_id"]),
                    subject=r["subject"],
                    exam_type=r["exam_type"],
                    marks_obtained=int(r["marks_obtained"]),
                    total_marks=int(r["total_marks"]),
                    class_id=int(r["class_id"]),
                    created_by=int(r["created_by"]),
                    created_at=r.get("created_at"),
                    created_by_name=_creator_name(r),
                )
                for r in fetchall(cur)
            ]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_marks(student_id, subject, exam_type, marks_obtained, total_marks, class_id, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(student_id), subject, exam_type, int(marks_obtained), int(total_marks), int(class_id), int(created_by)),
            )
            return int(cur.lastrowid)

    def delete_for_class(self, class_id: int) -> int:
        removed = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for table in ("study_materials", "notices", "events", "student_marks"):
                cur.execute(f"DELETE FROM {table} WHERE class_id=%s", (int(class_id),))
                removed += int(cur.rowcount)
        return removed
