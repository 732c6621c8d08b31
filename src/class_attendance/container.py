from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .common.datetime_utils import Clock, now_local
from .core.constants import DEFAULT_TOKEN_TTL_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .resources.mysql_resource_repository import MySQLResourceRepository
from .resources.repository import ResourceRepository
from .resources.service import ResourceService
from .resources.storage import FileStore
from .users.lifecycle import PrincipalLifecycleManager
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    classes_repo: ClassRepository
    attendance_repo: AttendanceRepository
    resources_repo: ResourceRepository
    file_store: Optional[FileStore]

    token_service: TokenService
    auth_service: AuthService
    user_service: UserService
    class_service: ClassService
    attendance_service: AttendanceService
    resource_service: ResourceService
    lifecycle: PrincipalLifecycleManager

    conn: Optional[DatabaseConnection] = None


def assemble_container(
    *,
    users_repo: UserRepository,
    classes_repo: ClassRepository,
    attendance_repo: AttendanceRepository,
    resources_repo: ResourceRepository,
    secret_key: str,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    file_store: Optional[FileStore] = None,
    clock: Clock = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories (MySQL in production, fakes in tests)."""

    class_service = ClassService(classes_repo, users_repo, resources_repo)
    return Container(
        users_repo=users_repo,
        classes_repo=classes_repo,
        attendance_repo=attendance_repo,
        resources_repo=resources_repo,
        file_store=file_store,
        token_service=TokenService(secret_key, ttl_hours=token_ttl_hours, clock=clock),
        auth_service=AuthService(users_repo, classes_repo),
        user_service=UserService(users_repo),
        class_service=class_service,
        attendance_service=AttendanceService(attendance_repo, users_repo, class_service, clock=clock),
        resource_service=ResourceService(resources_repo, users_repo, class_service, file_store=file_store),
        lifecycle=PrincipalLifecycleManager(users_repo, attendance_repo, classes_repo),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    file_store: Optional[FileStore] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        resources_repo=MySQLResourceRepository(conn),
        secret_key=secret_key,
        token_ttl_hours=token_ttl_hours,
        file_store=file_store,
        conn=conn,
    )
