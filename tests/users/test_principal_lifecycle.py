from __future__ import annotations

import pytest

from class_attendance.core.exceptions import ForbiddenError, NotFoundError, StoreFailure

from fakes import current


def test_delete_principal_cascades_attendance(school):
    school.container.attendance_service.check_in(current(school.student_a))
    school.clock.advance(days=1)
    school.container.attendance_service.check_in(current(school.student_a))

    removed = school.container.lifecycle.delete_principal(current(school.admin), school.student_a.user_id)

    assert removed == 2
    assert school.users.get_by_id(school.student_a.user_id) is None
    assert school.attendance.all_for_user(school.student_a.user_id) == []


def test_admin_cannot_delete_self(school):
    with pytest.raises(ForbiddenError):
        school.container.lifecycle.delete_principal(current(school.admin), school.admin.user_id)
    assert school.users.get_by_id(school.admin.user_id) is not None


def test_non_admin_cannot_delete(school):
    school.container.attendance_service.check_in(current(school.student_b))
    with pytest.raises(ForbiddenError):
        school.container.lifecycle.delete_principal(current(school.teacher_b), school.student_b.user_id)
    assert len(school.attendance.all_for_user(school.student_b.user_id)) == 1


def test_delete_missing_user(school):
    with pytest.raises(NotFoundError):
        school.container.lifecycle.delete_principal(current(school.admin), 999)


def test_failure_after_attendance_removal_keeps_user(school):
    school.container.attendance_service.check_in(current(school.student_a))
    school.users.fail_delete = True

    with pytest.raises(StoreFailure):
        school.container.lifecycle.delete_principal(current(school.admin), school.student_a.user_id)
    assert school.users.get_by_id(school.student_a.user_id) is not None
    assert school.attendance.all_for_user(school.student_a.user_id) == []


def test_list_users_is_admin_only(school):
    users = school.container.user_service
    assert len(users.list_users(current(school.admin))) == 6
    with pytest.raises(ForbiddenError):
        users.list_users(current(school.teacher_a))


def test_profile_merges_stored_fields(school):
    profile = school.container.user_service.get_profile(current(school.student_a))
    assert profile["username"] == "student"
    assert profile["student_id"] == "S-001"
    assert profile["class_id"] == school.class_a


def test_deleting_a_teacher_detaches_it_from_its_class(school):
    school.container.lifecycle.delete_principal(current(school.admin), school.teacher_b.user_id)

    assert school.users.get_by_id(school.teacher_b.user_id) is None
    assert school.classes.get_by_id(school.class_b).teacher_id is None
    assert school.classes.get_by_id(school.class_a).teacher_id == school.teacher_a.user_id
    assert school.container.class_service.get_my_class(current(school.student_b))["teacher_name"] is None
