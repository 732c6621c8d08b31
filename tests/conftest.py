from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import pytest

from class_attendance.container import Container, assemble_container
from class_attendance.core.enums import Role
from class_attendance.users.model import User

from fakes import (
    FixedClock,
    InMemoryAttendance,
    InMemoryClasses,
    InMemoryFileStore,
    InMemoryResources,
    InMemoryUsers,
)


@dataclass
class School:
    """Two classes (A, B), their teachers and students, an admin and an unassigned student."""

    container: Container
    clock: FixedClock
    users: InMemoryUsers
    classes: InMemoryClasses
    attendance: InMemoryAttendance
    resources: InMemoryResources
    files: InMemoryFileStore

    class_a: int
    class_b: int
    admin: User
    teacher_a: User
    teacher_b: User
    student_a: User
    student_b: User
    loner: User


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 4, 9, 0, 0)


@pytest.fixture
def school(fixed_now) -> School:
    clock = FixedClock(fixed_now)
    users = InMemoryUsers()
    classes = InMemoryClasses(users)
    attendance = InMemoryAttendance(users)
    resources = InMemoryResources()
    files = InMemoryFileStore()

    admin = users.add("admin", Role.ADMIN)
    teacher_a = users.add("teacher", Role.TEACHER, first_name="Tina", last_name="Teach")
    teacher_b = users.add("teacher_b", Role.TEACHER)
    class_a = classes.create_class(name="Class A", description="Demo class", teacher_id=teacher_a.user_id)
    class_b = classes.create_class(name="Class B", description=None, teacher_id=teacher_b.user_id)
    users.assign(teacher_a.user_id, class_a)
    users.assign(teacher_b.user_id, class_b)
    student_a = users.add("student", Role.STUDENT, class_id=class_a, student_code="S-001")
    student_b = users.add("student_b", Role.STUDENT, class_id=class_b, student_code="S-002")
    loner = users.add("loner", Role.STUDENT)

    container = assemble_container(
        users_repo=users,
        classes_repo=classes,
        attendance_repo=attendance,
        resources_repo=resources,
        secret_key="test-secret",
        file_store=files,
        clock=clock,
    )
    return School(
        container=container,
        clock=clock,
        users=users,
        classes=classes,
        attendance=attendance,
        resources=resources,
        files=files,
        class_a=class_a,
        class_b=class_b,
        admin=admin,
        teacher_a=users.get_by_id(teacher_a.user_id),
        teacher_b=users.get_by_id(teacher_b.user_id),
        student_a=student_a,
        student_b=student_b,
        loner=loner,
    )
