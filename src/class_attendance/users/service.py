from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..classes.repository import ClassRepository
from ..common.validators import optional_positive_int, optional_text, require_non_empty
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    DuplicateIdentityError,
    DuplicateKeyError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from ..policy.authorization import Action, Actor, enforce
from .model import CurrentUser, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: register and authenticate principals."""

    def __init__(self, users: UserRepository, classes: ClassRepository):
        self._users = users
        self._classes = classes

    def authenticate(self, login: str, password: str) -> User:
        login = (login or "").strip()
        if not login or not password:
            raise ValidationError("Username and password are required")

        user = self._users.get_by_username_or_email(login)
        if not user:
            logger.info("Login failed for unknown user %r", login)
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except (ValueError, TypeError):
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            logger.info("Login failed for user %s", user.user_id)
            raise AuthenticationError("Invalid credentials")

        logger.info("User %s logged in", user.user_id)
        return user

    def register(
        self,
        *,
        username: str,
        email: str,
        password: str,
        role: str | Role | None = None,
        class_id=None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        student_code: Optional[str] = None,
    ) -> User:
        if not username or not email or not password:
            raise ValidationError("Username, email, and password are required")
        username = require_non_empty(username, "Username")
        email = require_non_empty(email, "Email")

        try:
            role = Role(role or Role.STUDENT)
        except ValueError:
            raise ValidationError("Invalid role")
        if role == Role.ADMIN:
            raise ForbiddenError("Admin accounts cannot be self-registered")

        class_id = optional_positive_int(class_id, "class_id")
        if class_id is not None and not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        if self._users.exists_username_or_email(username=username, email=email):
            raise DuplicateIdentityError("Username or email already exists")

        try:
            user_id = self._users.create_user(
                username=username,
                email=email,
                password_hash=generate_password_hash(password),
                role=role,
                class_id=class_id,
                first_name=optional_text(first_name),
                last_name=optional_text(last_name),
                student_code=optional_text(student_code),
            )
        except DuplicateKeyError as e:
            raise DuplicateIdentityError("Username or email already exists") from e

        logger.info("Registered user %s with role %s", user_id, role.value)
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user


class UserService:
    """Use case: profile and admin user listing."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_profile(self, current_user: CurrentUser) -> dict:
        """Claims from the token, plus stored profile fields when the user still exists."""

        profile = current_user.to_dict()
        user = self._users.get_by_id(current_user.user_id)
        if user:
            public = user.to_public_dict()
            profile.update(
                {k: public[k] for k in ("first_name", "last_name", "student_id", "class_id", "display_name")}
            )
        return profile

    def list_users(self, current_user: CurrentUser) -> Sequence[User]:
        enforce(Actor(user_id=current_user.user_id, role=current_user.role), Action.LIST_USERS)
        return self._users.list_all()
