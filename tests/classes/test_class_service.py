from __future__ import annotations

import pytest

from class_attendance.core.enums import Role
from class_attendance.core.exceptions import ClassInUseError, ForbiddenError, NotFoundError, ValidationError

from fakes import current


def test_class_of_resolves_membership(school):
    classes = school.container.class_service
    assert classes.class_of(school.student_a.user_id).class_id == school.class_a
    assert classes.class_of(school.loner.user_id) is None
    assert classes.class_of(999) is None


def test_membership_is_read_fresh(school):
    classes = school.container.class_service
    school.users.assign(school.loner.user_id, school.class_b)
    assert classes.actor_for(current(school.loner)).class_id == school.class_b


def test_my_class_and_classmates(school):
    classes = school.container.class_service
    mine = classes.get_my_class(current(school.student_a))
    assert mine["name"] == "Class A"
    assert mine["teacher_name"] == "Tina Teach"
    assert classes.get_my_class(current(school.loner)) is None

    mates = classes.list_my_classmates(current(school.teacher_a))
    assert [u.username for u in mates] == ["student"]
    assert classes.list_my_classmates(current(school.loner)) == []


def test_list_classes_requires_staff(school):
    classes = school.container.class_service
    summaries = classes.list_classes(current(school.teacher_b))
    assert {s.name for s in summaries} == {"Class A", "Class B"}
    with pytest.raises(ForbiddenError):
        classes.list_classes(current(school.student_a))


def test_students_of_any_class_for_staff(school):
    classes = school.container.class_service
    students = classes.list_students(current(school.teacher_a), school.class_b)
    assert [u.username for u in students] == ["student_b"]
    with pytest.raises(ForbiddenError):
        classes.list_students(current(school.student_a), school.class_a)
    with pytest.raises(NotFoundError):
        classes.list_students(current(school.admin), 999)


def test_admin_manages_classes(school):
    classes = school.container.class_service
    new_id = classes.create_class(current(school.admin), name="Class C", teacher_id=school.teacher_b.user_id)
    classes.update_class(current(school.admin), class_id=new_id, name="Class C2", description="renamed")

    assert school.classes.get_by_id(new_id).name == "Class C2"
    with pytest.raises(ForbiddenError):
        classes.create_class(current(school.teacher_a), name="Nope")
    with pytest.raises(NotFoundError):
        classes.update_class(current(school.admin), class_id=999, name="x")


def test_class_teacher_must_be_a_teacher(school):
    classes = school.container.class_service
    with pytest.raises(ValidationError):
        classes.create_class(current(school.admin), name="Bad", teacher_id=school.student_a.user_id)
    with pytest.raises(NotFoundError):
        classes.create_class(current(school.admin), name="Bad", teacher_id=999)
    with pytest.raises(ValidationError):
        classes.create_class(current(school.admin), name="  ")


def test_delete_class_with_members_is_refused(school):
    with pytest.raises(ClassInUseError):
        school.container.class_service.delete_class(current(school.admin), school.class_a)
    assert school.classes.get_by_id(school.class_a) is not None


def test_delete_empty_class_removes_its_resources(school):
    school.container.resource_service.create_notice(
        current(school.teacher_b), title="Bye", content="Class closing"
    )
    for user in school.users.list_by_class(school.class_b):
        school.users.assign(user.user_id, None)

    school.container.class_service.delete_class(current(school.admin), school.class_b)

    assert school.classes.get_by_id(school.class_b) is None
    assert school.resources.list_notices(school.class_b) == []
    assert school.users.get_by_id(school.student_b.user_id).role == Role.STUDENT
