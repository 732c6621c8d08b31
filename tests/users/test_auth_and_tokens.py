from __future__ import annotations

import base64
import json

import pytest
from jose import jwt
from werkzeug.security import generate_password_hash

from class_attendance.core.enums import Role
from class_attendance.core.exceptions import (
    AuthenticationError,
    DuplicateIdentityError,
    ForbiddenError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)


def test_register_defaults_to_student_and_hashes_password(school):
    auth = school.container.auth_service
    user = auth.register(username="newbie", email="newbie@example.com", password="pw123456")

    assert user.role == Role.STUDENT
    assert user.password_hash != "pw123456"
    assert "password_hash" not in user.to_public_dict()


def test_register_rejects_duplicate_username_or_email(school):
    auth = school.container.auth_service
    with pytest.raises(DuplicateIdentityError):
        auth.register(username="student", email="other@example.com", password="pw")
    with pytest.raises(DuplicateIdentityError):
        auth.register(username="other", email="student@example.com", password="pw")


def test_register_validation(school):
    auth = school.container.auth_service
    with pytest.raises(ValidationError):
        auth.register(username="", email="x@example.com", password="pw")
    with pytest.raises(ValidationError):
        auth.register(username="x", email="x@example.com", password="pw", role="janitor")
    with pytest.raises(NotFoundError):
        auth.register(username="x", email="x@example.com", password="pw", class_id=999)


def test_admin_cannot_be_self_registered(school):
    with pytest.raises(ForbiddenError):
        school.container.auth_service.register(username="boss", email="boss@example.com", password="pw", role="admin")
    assert school.users.get_by_username_or_email("boss") is None

    teacher = school.container.auth_service.register(
        username="newteacher", email="nt@example.com", password="pw", role="teacher", class_id=school.class_a
    )
    assert teacher.role == Role.TEACHER
    assert teacher.class_id == school.class_a


def test_login_by_username_or_email(school):
    auth = school.container.auth_service
    auth.register(username="alice", email="alice@example.com", password="s3cret")

    assert auth.authenticate("alice", "s3cret").username == "alice"
    assert auth.authenticate("alice@example.com", "s3cret").username == "alice"


def test_login_failures_look_the_same(school):
    auth = school.container.auth_service
    school.users.add("bob", Role.STUDENT, password_hash=generate_password_hash("right"))

    with pytest.raises(AuthenticationError) as wrong_pw:
        auth.authenticate("bob", "wrong")
    with pytest.raises(AuthenticationError) as unknown:
        auth.authenticate("nobody", "wrong")
    assert wrong_pw.value.message == unknown.value.message


def test_login_with_unusable_stored_hash(school):
    # seeded placeholder hashes must not crash the login path
    with pytest.raises(AuthenticationError):
        school.container.auth_service.authenticate("student", "anything")


def test_token_round_trip_carries_claims(school):
    tokens = school.container.token_service
    resolved = tokens.resolve(tokens.issue(school.teacher_a))

    assert resolved.user_id == school.teacher_a.user_id
    assert resolved.role == Role.TEACHER
    assert resolved.email == school.teacher_a.email


def test_token_expires_after_ttl(school):
    tokens = school.container.token_service
    token = tokens.issue(school.student_a)

    school.clock.advance(hours=23, minutes=59)
    assert tokens.resolve(token).user_id == school.student_a.user_id

    school.clock.advance(minutes=1)
    with pytest.raises(InvalidCredentialError):
        tokens.resolve(token)


def test_tampered_or_foreign_tokens_are_rejected(school):
    tokens = school.container.token_service
    token = tokens.issue(school.student_a)

    header, _, signature = token.split(".")
    elevated = {"id": 1, "username": "admin", "email": "a", "role": "admin", "exp": 4102444800}
    claims = base64.urlsafe_b64encode(json.dumps(elevated).encode()).rstrip(b"=").decode()
    with pytest.raises(InvalidCredentialError):
        tokens.resolve(f"{header}.{claims}.{signature}")

    forged = jwt.encode({"id": 1, "username": "admin", "email": "a", "role": "admin", "exp": 4102444800}, "other")
    with pytest.raises(InvalidCredentialError):
        tokens.resolve(forged)


def test_deleted_user_token_still_resolves(school):
    tokens = school.container.token_service
    token = tokens.issue(school.student_b)
    school.container.lifecycle.delete_principal(
        tokens.resolve(tokens.issue(school.admin)), school.student_b.user_id
    )

    assert tokens.resolve(token).user_id == school.student_b.user_id
