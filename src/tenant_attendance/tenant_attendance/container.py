from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceQueryService, CheckInService
from .attendance.verification.factory import VerifierFactory
from .auth.guard import TenantGuard
from .auth.mysql_session_repository import MySQLRefreshSessionRepository
from .auth.passwords import PasswordHasher, WerkzeugPasswordHasher
from .auth.repository import RefreshSessionRepository
from .auth.session_store import RefreshSessionStore
from .auth.tokens import TokenCodec
from .common.datetime_utils import now_utc
from .core.settings import AppSettings
from .database.connection import DatabaseConnection, DBConfig
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .integrations.face_oracle import FaceOracle, RekognitionFaceOracle
from .integrations.photos import PhotoService
from .integrations.storage import ObjectStore, S3ObjectStore
from .tenants.mysql_tenant_repository import MySQLTenantRepository
from .tenants.repository import TenantRepository
from .tenants.service import TenantAuthService, TenantProfileService


@dataclass(frozen=True)
class Container:
    settings: AppSettings
    conn: Optional[DatabaseConnection]

    tenants_repo: TenantRepository
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    sessions_repo: RefreshSessionRepository

    codec: TokenCodec
    session_store: RefreshSessionStore
    guard: TenantGuard

    auth_service: TenantAuthService
    profile_service: TenantProfileService
    employee_service: EmployeeService
    checkin_service: CheckInService
    attendance_query_service: AttendanceQueryService
    photo_service: PhotoService


def build_container(
    settings: AppSettings,
    *,
    tenants_repo: Optional[TenantRepository] = None,
    employees_repo: Optional[EmployeeRepository] = None,
    attendance_repo: Optional[AttendanceRepository] = None,
    sessions_repo: Optional[RefreshSessionRepository] = None,
    face_oracle: Optional[FaceOracle] = None,
    object_store: Optional[ObjectStore] = None,
    password_hasher: Optional[PasswordHasher] = None,
    clock: Callable[[], datetime] = now_utc,
) -> Container:
    """Wire repositories and services; anything passed in replaces the MySQL/AWS default."""
    conn: Optional[DatabaseConnection] = None
    if None in (tenants_repo, employees_repo, attendance_repo, sessions_repo):
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.db_config))

    tenants_repo = tenants_repo or MySQLTenantRepository(conn)
    employees_repo = employees_repo or MySQLEmployeeRepository(conn)
    attendance_repo = attendance_repo or MySQLAttendanceRepository(conn)
    sessions_repo = sessions_repo or MySQLRefreshSessionRepository(conn)

    timeout = settings.external_timeout_seconds
    face_oracle = face_oracle or RekognitionFaceOracle(settings.aws, timeout_seconds=timeout)
    object_store = object_store or S3ObjectStore(settings.aws, timeout_seconds=timeout)

    codec = TokenCodec(settings.jwt, clock=clock)
    session_store = RefreshSessionStore(sessions_repo, clock=clock)
    guard = TenantGuard()

    auth_service = TenantAuthService(tenants_repo, session_store, codec, password_hasher or WerkzeugPasswordHasher())
    profile_service = TenantProfileService(tenants_repo)
    employee_service = EmployeeService(employees_repo, tenants_repo, attendance_repo, guard, clock=clock)
    checkin_service = CheckInService(
        attendance_repo,
        employees_repo,
        tenants_repo,
        codec,
        VerifierFactory.default(face_oracle, similarity_threshold=settings.similarity_threshold),
        radius_meters=settings.checkin_radius_meters,
        day_tz=settings.day_boundary_tz,
        clock=clock,
    )
    attendance_query_service = AttendanceQueryService(
        attendance_repo, employees_repo, guard, day_tz=settings.day_boundary_tz
    )
    photo_service = PhotoService(object_store, codec)

    return Container(
        settings=settings,
        conn=conn,
        tenants_repo=tenants_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        sessions_repo=sessions_repo,
        codec=codec,
        session_store=session_store,
        guard=guard,
        auth_service=auth_service,
        profile_service=profile_service,
        employee_service=employee_service,
        checkin_service=checkin_service,
        attendance_query_service=attendance_query_service,
        photo_service=photo_service,
    )
