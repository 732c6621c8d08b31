from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceState, AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's check-in/check-out pair for one calendar day."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    note: Optional[str] = None

    @property
    def state(self) -> AttendanceState:
        if self.check_in_time is None:
            return AttendanceState.NO_RECORD
        if self.check_out_time is None:
            return AttendanceState.CHECKED_IN
        return AttendanceState.COMPLETE


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model for admin/class listings (record joined with its user)."""

    record: AttendanceRecord
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    student_code: Optional[str] = None


@dataclass(frozen=True)
class TodaySnapshot:
    state: AttendanceState
    record: Optional[AttendanceRecord]
    hours_worked: str
