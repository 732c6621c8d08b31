from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

_COLUMNS = "ar.attendance_id, ar.user_id, ar.work_date, ar.check_in_time, ar.check_out_time, ar.status, ar.note"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        note=r.get("note"),
    )


def _date_clauses(
    clauses: list[str],
    params: list[object],
    start_date: Optional[date],
    end_date: Optional[date],
) -> None:
    if start_date and end_date:
        clauses.append("ar.work_date BETWEEN %s AND %s")
        params.extend([start_date, end_date])


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.user_id=%s AND ar.work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 30,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.user_id=%s"]
        params: list[object] = [int(user_id)]
        _date_clauses(clauses, params, start_date, end_date)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE {" AND ".join(clauses)}
                ORDER BY ar.work_date DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        class_id: Optional[int] = None,
    ) -> Sequence[AttendanceRow]:
        clauses: list[str] = []
        params: list[object] = []
        if class_id is not None:
            clauses.append("u.class_id=%s")
            params.append(int(class_id))
        _date_clauses(clauses, params, start_date, end_date)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, u.username, u.first_name, u.last_name, u.student_code
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                {where}
                ORDER BY ar.work_date DESC, u.first_name, u.last_name, ar.created_at DESC
                """,
                tuple(params),
            )
            return [
                AttendanceRow(
                    record=_to_record(r),
                    username=r["username"],
                    first_name=r.get("first_name"),
                    last_name=r.get("last_name"),
                    student_code=r.get("student_code"),
                )
                for r in fetchall(cur)
            ]

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, work_date, check_in_time, status, note)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), work_date, check_in_time, status.value, note),
            )
            return int(cur.lastrowid)

    def close_checkout(self, *, attendance_id: int, check_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, int(attendance_id)),
            )
            return cur.rowcount == 1

    def delete_by_id(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount == 1

    def delete_many(self, attendance_ids: Sequence[int]) -> int:
        ids = [int(i) for i in attendance_ids]
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM attendance_records WHERE attendance_id IN ({in_clause(ids)})", tuple(ids))
            return int(cur.rowcount)

    def delete_for_user(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE user_id=%s", (int(user_id),))
            return int(cur.rowcount)
