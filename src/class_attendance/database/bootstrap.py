from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue

        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> None:
    ensure_database_exists(conn_factory)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_data(conn_factory: DatabaseConnection) -> None:
    """Create the demo admin/teacher/student accounts and "Class A"."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(username: str, password: str, role: str, first_name: str, last_name: str, student_code=None) -> int:
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            existing = cur.fetchone()
            if existing:
                return int(existing["user_id"])
            cur.execute(
                """
                INSERT INTO users (username, email, password_hash, role, first_name, last_name, student_code)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    username,
                    f"{username}@example.com",
                    generate_password_hash(password),
                    role,
                    first_name,
                    last_name,
                    student_code,
                ),
            )
            return int(cur.lastrowid)

        upsert_user("admin", "admin123", "admin", "Admin", "User")
        teacher_id = upsert_user("teacher", "teacher123", "teacher", "John", "Teacher")
        student_id = upsert_user("student", "student123", "student", "Jane", "Student", "STU001")

        cur.execute("SELECT class_id FROM classes WHERE name=%s", ("Class A",))
        row = cur.fetchone()
        if row:
            class_id = int(row["class_id"])
        else:
            cur.execute(
                "INSERT INTO classes (name, description, teacher_id) VALUES (%s, %s, %s)",
                ("Class A", "Default class for testing", teacher_id),
            )
            class_id = int(cur.lastrowid)

        cur.execute(
            "UPDATE users SET class_id=%s WHERE user_id IN (%s, %s) AND class_id IS NULL",
            (class_id, teacher_id, student_id),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo data ready")


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
