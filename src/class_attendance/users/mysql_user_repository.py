from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, username, email, password_hash, role, class_id, first_name, last_name, student_code, created_at"


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        class_id=row.get("class_id"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        student_code=row.get("student_code"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username_or_email(self, login: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE BINARY username=%s OR BINARY email=%s
                ORDER BY (BINARY username=%s) DESC
                LIMIT 1
                """,
                (login, login, login),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def exists_username_or_email(self, *, username: str, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM users WHERE BINARY username=%s OR BINARY email=%s LIMIT 1",
                (username, email),
            )
            return fetchone(cur) is not None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(username, email, password_hash, role, class_id, first_name, last_name, student_code)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (username, email, password_hash, role.value, class_id, first_name, last_name, student_code),
            )
            return int(cur.lastrowid)

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount == 1

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id")
            return [_to_user(r) for r in fetchall(cur)]

    def list_by_class(self, class_id: int, *, role: Optional[Role] = None) -> Sequence[User]:
        clauses = ["class_id=%s"]
        params: list[object] = [int(class_id)]
        if role is not None:
            clauses.append("role=%s")
            params.append(role.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE {" AND ".join(clauses)}
                ORDER BY first_name, last_name
                """,
                tuple(params),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def count_by_class(self, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE class_id=%s", (int(class_id),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0
