from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for principals.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username_or_email(self, login: str) -> Optional[User]:
        raise NotImplementedError

    def exists_username_or_email(self, *, username: str, email: str) -> bool:
        raise NotImplementedError

    def create_user(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: Role,
        class_id: Optional[int],
        first_name: Optional[str],
        last_name: Optional[str],
        student_code: Optional[str],
    ) -> int:
        """Insert a user; raises ``DuplicateKeyError`` on a username/email clash."""

        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_by_class(self, class_id: int, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError

    def count_by_class(self, class_id: int) -> int:
        raise NotImplementedError
