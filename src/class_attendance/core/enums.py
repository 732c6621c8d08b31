from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Principal roles used for authorization."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    PRESENT = "present"


class AttendanceState(str, Enum):
    """Per-day state of a user's attendance."""

    NO_RECORD = "NO_RECORD"
    CHECKED_IN = "CHECKED_IN"
    COMPLETE = "COMPLETE"


class ResourceKind(str, Enum):
    MATERIAL = "material"
    NOTICE = "notice"
    EVENT = "event"
    MARK = "mark"


class NoticePriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class EventType(str, Enum):
    EVENT = "event"
    EXAM = "exam"
    HOLIDAY = "holiday"
    MEETING = "meeting"
