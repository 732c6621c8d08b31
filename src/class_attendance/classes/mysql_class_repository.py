from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassGroup, ClassSummary
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[ClassGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, name, description, teacher_id, created_at FROM classes WHERE class_id=%s",
                (int(class_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClassGroup(
                class_id=int(r["class_id"]),
                name=r["name"],
                description=r.get("description"),
                teacher_id=r.get("teacher_id"),
                created_at=r.get("created_at"),
            )

    def list_summaries(self) -> Sequence[ClassSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.name, c.description, c.teacher_id,
                       t.first_name AS teacher_first_name, t.last_name AS teacher_last_name,
                       COUNT(s.user_id) AS student_count
                FROM classes c
                LEFT JOIN users t ON t.user_id = c.teacher_id
                LEFT JOIN users s ON s.class_id = c.class_id AND s.role = 'student'
                GROUP BY c.class_id, c.name, c.description, c.teacher_id, t.first_name, t.last_name
                ORDER BY c.name
                """
            )
            out: list[ClassSummary] = []
            for r in fetchall(cur):
                teacher_name = " ".join(p for p in (r.get("teacher_first_name"), r.get("teacher_last_name")) if p)
                out.append(
                    ClassSummary(
                        class_id=int(r["class_id"]),
                        name=r["name"],
                        description=r.get("description"),
                        teacher_id=r.get("teacher_id"),
                        teacher_name=teacher_name or None,
                        student_count=int(r.get("student_count") or 0),
                    )
                )
            return out

    def create_class(self, *, name: str, description: Optional[str], teacher_id: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(name, description, teacher_id) VALUES(%s,%s,%s)",
                (name, description, teacher_id),
            )
            return int(cur.lastrowid)

    def update_class(self, *, class_id: int, name: str, description: Optional[str], teacher_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classes SET name=%s, description=%s, teacher_id=%s WHERE class_id=%s",
                (name, description, teacher_id, int(class_id)),
            )
            # MySQL reports 0 changed rows when values are identical; fall back to existence.
            if cur.rowcount == 1:
                return True
            cur.execute("SELECT 1 AS found FROM classes WHERE class_id=%s", (int(class_id),))
            return fetchone(cur) is not None

    def delete_class(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM classes WHERE class_id=%s", (int(class_id),))
            return cur.rowcount == 1

    def clear_teacher(self, teacher_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE classes SET teacher_id=NULL WHERE teacher_id=%s", (int(teacher_id),))
            return int(cur.rowcount)
