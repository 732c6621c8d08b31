from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..classes.service import ClassService
from ..common.datetime_utils import Clock, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT, HOURS_UNDEFINED
from ..core.enums import AttendanceState, AttendanceStatus
from ..core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    DuplicateKeyError,
    NoOpenCheckInError,
    NotFoundError,
    ValidationError,
)
from ..policy.authorization import Action, Target, enforce
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .hours import hours_worked
from .model import AttendanceRecord, AttendanceRow, TodaySnapshot
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """The daily attendance ledger.

    Per (user, calendar day) the state moves NO_RECORD -> CHECKED_IN -> COMPLETE
    and never back. ``check_out`` only closes today's record; a record left open
    on an earlier day stays CHECKED_IN, reports "--:--" hours and can only
    be deleted.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        class_service: ClassService,
        *,
        clock: Clock = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._class_service = class_service
        self._clock = clock

    # -- state machine ------------------------------------------------------

    def _require_user(self, user_id: int) -> None:
        # Tokens outlive a deleted principal; never write rows for a missing user.
        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")

    def _hours(self, record: AttendanceRecord, now: datetime) -> str:
        if record.check_out_time is None and record.work_date < now.date():
            return HOURS_UNDEFINED
        return hours_worked(record.check_in_time, record.check_out_time, now)

    def check_in(self, current_user: CurrentUser) -> AttendanceRecord:
        enforce(self._class_service.actor_for(current_user), Action.CHECK_SELF)
        now = self._clock()
        today = now.date()
        user_id = current_user.user_id
        self._require_user(user_id)

        if self._attendance.get_for_user_and_date(user_id, today):
            raise AlreadyCheckedInError("Already checked in today")

        try:
            attendance_id = self._attendance.create_checkin(
                user_id=user_id,
                work_date=today,
                check_in_time=now,
                status=AttendanceStatus.PRESENT,
            )
        except DuplicateKeyError as e:
            # A concurrent check-in won the (user, date) unique key.
            raise AlreadyCheckedInError("Already checked in today") from e

        logger.info("User %s checked in at %s", user_id, now.isoformat(timespec="seconds"))
        return AttendanceRecord(
            attendance_id=attendance_id,
            user_id=user_id,
            work_date=today,
            check_in_time=now,
            check_out_time=None,
            status=AttendanceStatus.PRESENT,
        )

    def check_out(self, current_user: CurrentUser) -> AttendanceRecord:
        enforce(self._class_service.actor_for(current_user), Action.CHECK_SELF)
        now = self._clock()
        user_id = current_user.user_id
        self._require_user(user_id)

        record = self._attendance.get_for_user_and_date(user_id, now.date())
        if not record:
            raise NoOpenCheckInError("No check-in found for today")
        if record.check_out_time is not None:
            raise AlreadyCheckedOutError("Already checked out today")

        if not self._attendance.close_checkout(attendance_id=record.attendance_id, check_out_time=now):
            # Lost a race with another check-out, or the record vanished.
            if self._attendance.get_by_id(record.attendance_id) is None:
                raise NoOpenCheckInError("No check-in found for today")
            raise AlreadyCheckedOutError("Already checked out today")

        logger.info("User %s checked out at %s", user_id, now.isoformat(timespec="seconds"))
        return AttendanceRecord(
            attendance_id=record.attendance_id,
            user_id=record.user_id,
            work_date=record.work_date,
            check_in_time=record.check_in_time,
            check_out_time=now,
            status=record.status,
            note=record.note,
        )

    def query_today(self, current_user: CurrentUser) -> TodaySnapshot:
        now = self._clock()
        record = self._attendance.get_for_user_and_date(current_user.user_id, now.date())
        if not record:
            return TodaySnapshot(state=AttendanceState.NO_RECORD, record=None, hours_worked=hours_worked(None, None, now))
        return TodaySnapshot(
            state=record.state,
            record=record,
            hours_worked=hours_worked(record.check_in_time, record.check_out_time, now),
        )

    # -- reads ----------------------------------------------------------------

    def history(
        self,
        current_user: CurrentUser,
        *,
        user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        actor = self._class_service.actor_for(current_user)
        target_id = int(user_id) if user_id is not None else current_user.user_id

        if target_id == current_user.user_id:
            enforce(actor, Action.READ_OWN_ATTENDANCE)
        else:
            owner = self._users.get_by_id(target_id)
            enforce(
                actor,
                Action.READ_USER_ATTENDANCE,
                Target(owner_id=target_id, owner_class_id=owner.class_id if owner else None),
            )
            if not owner:
                raise NotFoundError("User not found")

        return self._attendance.list_for_user(target_id, start_date=start, end_date=end, limit=int(limit))

    def list_all(
        self,
        current_user: CurrentUser,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRow]:
        enforce(self._class_service.actor_for(current_user), Action.READ_ALL_ATTENDANCE)
        return self._attendance.list_rows(start_date=start, end_date=end)

    def list_for_class(
        self,
        current_user: CurrentUser,
        class_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRow]:
        enforce(
            self._class_service.actor_for(current_user),
            Action.READ_CLASS_ATTENDANCE,
            Target(class_id=int(class_id)),
        )
        self._class_service.get_class(class_id)
        return self._attendance.list_rows(start_date=start, end_date=end, class_id=int(class_id))

    # -- deletion ---------------------------------------------------------------

    def delete_record(self, current_user: CurrentUser, attendance_id: int) -> None:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")

        enforce(
            self._class_service.actor_for(current_user),
            Action.DELETE_ATTENDANCE,
            Target(owner_id=record.user_id),
        )

        if not self._attendance.delete_by_id(record.attendance_id):
            raise NotFoundError("Attendance record not found")
        logger.info("Attendance %s deleted by user %s", record.attendance_id, current_user.user_id)

    def bulk_delete(self, current_user: CurrentUser, attendance_ids: Sequence[int]) -> int:
        enforce(self._class_service.actor_for(current_user), Action.BULK_DELETE_ATTENDANCE)
        if not attendance_ids or not isinstance(attendance_ids, (list, tuple)):
            raise ValidationError("Attendance record IDs are required")
        try:
            ids = [int(i) for i in attendance_ids]
        except (TypeError, ValueError):
            raise ValidationError("Attendance record IDs must be numbers")

        deleted = self._attendance.delete_many(ids)
        logger.info("Bulk delete by user %s removed %s attendance record(s)", current_user.user_id, deleted)
        return deleted

    # -- presentation helpers -------------------------------------------------

    def to_view(self, record: AttendanceRecord) -> dict:
        return {
            "id": record.attendance_id,
            "user_id": record.user_id,
            "date": record.work_date.strftime("%Y-%m-%d"),
            "check_in": record.check_in_time.strftime("%H:%M:%S") if record.check_in_time else None,
            "check_out": record.check_out_time.strftime("%H:%M:%S") if record.check_out_time else None,
            "status": record.status.value,
            "state": record.state.value,
            "notes": record.note,
            "hours_worked": self._hours(record, self._clock()),
        }

    def row_to_view(self, row: AttendanceRow) -> dict:
        out = self.to_view(row.record)
        out.update(
            {
                "username": row.username,
                "first_name": row.first_name,
                "last_name": row.last_name,
                "student_id": row.student_code,
            }
        )
        return out
