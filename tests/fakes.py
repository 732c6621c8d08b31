from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from class_attendance.attendance.model import AttendanceRecord, AttendanceRow
from class_attendance.classes.model import ClassGroup, ClassSummary
from class_attendance.core.enums import AttendanceStatus, EventType, NoticePriority, Role
from class_attendance.core.exceptions import DuplicateKeyError, StoreFailure
from class_attendance.resources.model import Event, Mark, Notice, StudyMaterial
from class_attendance.resources.storage import StoredFile
from class_attendance.users.model import CurrentUser, User


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def current(user: User) -> CurrentUser:
    return CurrentUser(user_id=user.user_id, username=user.username, email=user.email, role=user.role)


class InMemoryUsers:
    def __init__(self):
        self._lock = threading.Lock()
        self._users: dict[int, User] = {}
        self._id = 0
        self.fail_delete = False

    def add(self, username: str, role: Role, *, class_id=None, password_hash="x", **extra) -> User:
        user_id = self.create_user(
            username=username,
            email=f"{username}@example.com",
            password_hash=password_hash,
            role=role,
            class_id=class_id,
            first_name=extra.get("first_name"),
            last_name=extra.get("last_name"),
            student_code=extra.get("student_code"),
        )
        return self._users[user_id]

    def assign(self, user_id: int, class_id: Optional[int]) -> None:
        self._users[user_id] = replace(self._users[user_id], class_id=class_id)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(int(user_id))

    def get_by_username_or_email(self, login: str) -> Optional[User]:
        for u in self._users.values():
            if u.username == login or u.email == login:
                return u
        return None

    def exists_username_or_email(self, *, username: str, email: str) -> bool:
        return any(u.username == username or u.email == email for u in self._users.values())

    def create_user(self, *, username, email, password_hash, role, class_id, first_name, last_name, student_code) -> int:
        with self._lock:
            if self.exists_username_or_email(username=username, email=email):
                raise DuplicateKeyError("Duplicate entry")
            self._id += 1
            self._users[self._id] = User(
                user_id=self._id,
                username=username,
                email=email,
                password_hash=password_hash,
                role=role,
                class_id=class_id,
                first_name=first_name,
                last_name=last_name,
                student_code=student_code,
            )
            return self._id

    def delete_by_id(self, user_id: int) -> bool:
        if self.fail_delete:
            raise StoreFailure("Database error")
        with self._lock:
            return self._users.pop(int(user_id), None) is not None

    def list_all(self) -> Sequence[User]:
        return list(self._users.values())

    def list_by_class(self, class_id: int, *, role: Optional[Role] = None) -> Sequence[User]:
        return [u for u in self._users.values() if u.class_id == class_id and (role is None or u.role == role)]

    def count_by_class(self, class_id: int) -> int:
        return len(self.list_by_class(class_id))


class InMemoryClasses:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self._classes: dict[int, ClassGroup] = {}
        self._id = 0

    def get_by_id(self, class_id: int) -> Optional[ClassGroup]:
        return self._classes.get(int(class_id))

    def list_summaries(self) -> Sequence[ClassSummary]:
        out = []
        for c in self._classes.values():
            teacher = self._users.get_by_id(c.teacher_id) if c.teacher_id else None
            out.append(
                ClassSummary(
                    class_id=c.class_id,
                    name=c.name,
                    description=c.description,
                    teacher_id=c.teacher_id,
                    teacher_name=teacher.display_name if teacher else None,
                    student_count=len(self._users.list_by_class(c.class_id, role=Role.STUDENT)),
                )
            )
        return out

    def create_class(self, *, name: str, description=None, teacher_id=None) -> int:
        self._id += 1
        self._classes[self._id] = ClassGroup(class_id=self._id, name=name, description=description, teacher_id=teacher_id)
        return self._id

    def update_class(self, *, class_id: int, name: str, description, teacher_id) -> bool:
        if class_id not in self._classes:
            return False
        self._classes[class_id] = ClassGroup(class_id=class_id, name=name, description=description, teacher_id=teacher_id)
        return True

    def delete_class(self, class_id: int) -> bool:
        return self._classes.pop(int(class_id), None) is not None

    def clear_teacher(self, teacher_id: int) -> int:
        led = [c for c in self._classes.values() if c.teacher_id == teacher_id]
        for c in led:
            self._classes[c.class_id] = replace(c, teacher_id=None)
        return len(led)


class InMemoryAttendance:
    """Enforces the (user, date) unique key and the conditional check-out like MySQL does."""

    def __init__(self, users: InMemoryUsers):
        self._users = users
        self._lock = threading.RLock()
        self._records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def put(self, record: AttendanceRecord) -> None:
        self._records[record.attendance_id] = record
        self._id = max(self._id, record.attendance_id)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._records.get(int(attendance_id))

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with self._lock:
            for r in self._records.values():
                if r.user_id == user_id and r.work_date == work_date:
                    return r
        return None

    def list_for_user(self, user_id: int, *, start_date=None, end_date=None, limit: int = 30):
        items = [r for r in self._records.values() if r.user_id == user_id]
        if start_date and end_date:
            items = [r for r in items if start_date <= r.work_date <= end_date]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def list_rows(self, *, start_date=None, end_date=None, class_id=None) -> Sequence[AttendanceRow]:
        rows = []
        for r in sorted(self._records.values(), key=lambda r: r.work_date, reverse=True):
            user = self._users.get_by_id(r.user_id)
            if not user:
                continue
            if class_id is not None and user.class_id != class_id:
                continue
            if start_date and end_date and not (start_date <= r.work_date <= end_date):
                continue
            rows.append(AttendanceRow(record=r, username=user.username, student_code=user.student_code))
        return rows

    def create_checkin(self, *, user_id, work_date, check_in_time, status, note=None) -> int:
        with self._lock:
            if self.get_for_user_and_date(user_id, work_date):
                raise DuplicateKeyError("Duplicate entry for key 'uq_attendance_user_date'")
            self._id += 1
            self._records[self._id] = AttendanceRecord(
                attendance_id=self._id,
                user_id=user_id,
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=None,
                status=status,
                note=note,
            )
            return self._id

    def close_checkout(self, *, attendance_id: int, check_out_time: datetime) -> bool:
        with self._lock:
            record = self._records.get(attendance_id)
            if not record or record.check_out_time is not None:
                return False
            self._records[attendance_id] = replace(record, check_out_time=check_out_time)
            return True

    def delete_by_id(self, attendance_id: int) -> bool:
        with self._lock:
            return self._records.pop(int(attendance_id), None) is not None

    def delete_many(self, attendance_ids: Sequence[int]) -> int:
        return sum(1 for i in attendance_ids if self.delete_by_id(i))

    def delete_for_user(self, user_id: int) -> int:
        with self._lock:
            ids = [r.attendance_id for r in self._records.values() if r.user_id == user_id]
            return self.delete_many(ids)

    def all_for_user(self, user_id: int) -> list[AttendanceRecord]:
        with self._lock:
            return [r for r in self._records.values() if r.user_id == user_id]


class InMemoryResources:
    def __init__(self):
        self.materials: list[StudyMaterial] = []
        self.notices: list[Notice] = []
        self.events: list[Event] = []
        self.marks: list[Mark] = []
        self._id = 0
        self.fail_writes = False

    def _next(self) -> int:
        if self.fail_writes:
            raise StoreFailure("Database error")
        self._id += 1
        return self._id

    def list_materials(self, class_id: int):
        return [m for m in self.materials if m.class_id == class_id]

    def get_material_by_file(self, file_path: str):
        return next((m for m in self.materials if m.file_path == file_path), None)

    def create_material(self, *, title, description, file_path, file_type, class_id, uploaded_by) -> int:
        material_id = self._next()
        self.materials.append(StudyMaterial(material_id, title, description, file_path, file_type, class_id, uploaded_by))
        return material_id

    def list_notices(self, class_id: int):
        return [n for n in self.notices if n.class_id == class_id]

    def create_notice(self, *, title, content, priority: NoticePriority, class_id, created_by) -> int:
        notice_id = self._next()
        self.notices.append(Notice(notice_id, title, content, priority, class_id, created_by))
        return notice_id

    def list_events(self, class_id: int):
        return [e for e in self.events if e.class_id == class_id]

    def create_event(self, *, title, description, event_type: EventType, event_date, event_time, class_id, created_by) -> int:
        event_id = self._next()
        self.events.append(Event(event_id, title, description, event_type, event_date, event_time, class_id, created_by))
        return event_id

    def list_marks(self, *, student_id=None, class_id=None):
        return [
            m
            for m in self.marks
            if (student_id is None or m.student_id == student_id) and (class_id is None or m.class_id == class_id)
        ]

    def create_mark(self, *, student_id, subject, exam_type, marks_obtained, total_marks, class_id, created_by) -> int:
        mark_id = self._next()
        self.marks.append(Mark(mark_id, student_id, subject, exam_type, marks_obtained, total_marks, class_id, created_by))
        return mark_id

    def delete_for_class(self, class_id: int) -> int:
        before = len(self.materials) + len(self.notices) + len(self.events) + len(self.marks)
        self.materials = [m for m in self.materials if m.class_id != class_id]
        self.notices = [n for n in self.notices if n.class_id != class_id]
        self.events = [e for e in self.events if e.class_id != class_id]
        self.marks = [m for m in self.marks if m.class_id != class_id]
        return before - (len(self.materials) + len(self.notices) + len(self.events) + len(self.marks))


class InMemoryFileStore:
    def __init__(self):
        self.saved: list[str] = []
        self.deleted: list[str] = []

    def save(self, upload) -> StoredFile:
        filename = f"file-{len(self.saved) + 1}.pdf"
        self.saved.append(filename)
        return StoredFile(filename=filename, extension="pdf")

    def delete(self, filename: str) -> None:
        self.deleted.append(filename)


def attendance_record(attendance_id, user_id, work_date, check_in, check_out=None) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=attendance_id,
        user_id=user_id,
        work_date=work_date,
        check_in_time=check_in,
        check_out_time=check_out,
        status=AttendanceStatus.PRESENT,
    )
