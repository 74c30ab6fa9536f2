from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from ..auth.guard import TenantGuard
from ..auth.tokens import TokenCodec
from ..common.datetime_utils import day_in_zone, now_utc, start_of_day
from ..common.pagination import Page, normalize_page
from ..common.validators import require_embedding, require_non_empty
from ..core.exceptions import (
    AlreadyCheckedInToday,
    EmployeeMismatch,
    EmployeeNotFound,
    FaceVerificationFailed,
    InvalidOrExpiredLocationToken,
    InvalidToken,
    TenantMismatch,
    TenantNotFound,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..geo.fence import is_within_radius, validate_coordinates
from ..tenants.model import Tenant
from ..tenants.repository import TenantRepository
from .model import Attendance, AttendanceReportRow, LocationCheckResult
from .repository import AttendanceRepository
from .verification.factory import VerifierFactory

logger = logging.getLogger(__name__)


class CheckInService:
    """Two-phase check-in.

    Phase 1 (`check_location`) issues a short-lived location proof when the
    employee is outside the office geofence. Phase 2 (`check_in`) redeems that
    proof, verifies identity according to the tenant's plan and writes at most
    one attendance per employee per calendar day.

    The proof is a self-contained signed token with no "used" flag, so it can be
    presented again until it expires. Duplicate attendance is prevented by the
    once-per-day rule, backed by the (employee_id, check_in_date) unique key.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        tenants: TenantRepository,
        codec: TokenCodec,
        verifiers: VerifierFactory,
        *,
        radius_meters: float,
        day_tz: ZoneInfo,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._employees = employees
        self._tenants = tenants
        self._codec = codec
        self._verifiers = verifiers
        self._radius = float(radius_meters)
        self._day_tz = day_tz
        self._clock = clock

    def _employee_and_tenant(self, employee_id: str) -> Tuple[Employee, Tenant]:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFound("Employee not found")
        tenant = self._tenants.get_by_id(employee.tenant_id)
        if not tenant:
            raise TenantNotFound("Tenant not found")
        return employee, tenant

    def check_location(self, employee_id: str, latitude: Any, longitude: Any) -> LocationCheckResult:
        lat, lon = validate_coordinates(latitude, longitude)
        employee, tenant = self._employee_and_tenant(employee_id)

        if is_within_radius(lat, lon, tenant.latitude, tenant.longitude, self._radius):
            # Policy: no proof is issued inside the office radius.
            return LocationCheckResult(
                success=False,
                message="You are within the office premises. Please proceed with check-in.",
            )

        token = self._codec.issue_location(
            tenant_id=tenant.tenant_id,
            employee_id=employee.employee_id,
            latitude=lat,
            longitude=lon,
        )
        logger.info(
            "Location proof issued: employee_id=%s tenant_id=%s",
            employee.employee_id,
            tenant.tenant_id,
        )
        return LocationCheckResult(
            success=True,
            message="Location verified. You are outside office premises.",
            location_token=token,
            tenant_id=tenant.tenant_id,
            tenant_name=tenant.tenant_name,
            address=tenant.address,
        )

    def check_in(self, employee_id: str, photo_url: str, embedding: Any, location_token: str) -> Attendance:
        try:
            proof = self._codec.verify_location(location_token)
        except InvalidToken:
            raise InvalidOrExpiredLocationToken("Invalid or expired location token")

        if proof.employee_id != employee_id:
            logger.warning(
                "Location proof presented for another employee: token_employee=%s request_employee=%s",
                proof.employee_id,
                employee_id,
            )
            raise EmployeeMismatch("Employee ID mismatch with location token")

        vector = require_embedding(embedding)
        photo_url = require_non_empty(photo_url, "Photo URL")

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFound("Employee not found")
        if employee.tenant_id != proof.tenant_id:
            logger.warning(
                "Location proof tenant mismatch: employee_id=%s token_tenant=%s",
                employee_id,
                proof.tenant_id,
            )
            raise TenantMismatch("Tenant mismatch")
        tenant = self._tenants.get_by_id(employee.tenant_id)
        if not tenant:
            raise TenantNotFound("Tenant not found")

        verifier = self._verifiers.for_plan(tenant.plan_type)
        outcome = verifier.verify(
            reference_photo=employee.photo_url,
            reference_embedding=employee.embedding,
            submitted_photo=photo_url,
            submitted_embedding=vector,
        )
        if not outcome.accepted:
            raise FaceVerificationFailed("Face verification failed. Please try again with a clear photo.")

        now = self._clock()
        today = day_in_zone(now, self._day_tz)
        if self._attendance.find_since(employee_id, start_of_day(today, self._day_tz)):
            raise AlreadyCheckedInToday("Already checked in today")

        # Two concurrent requests can both pass the query above; the unique key on
        # (employee_id, check_in_date) rejects the loser with AlreadyCheckedInToday.
        attendance = self._attendance.create_checkin(
            tenant_id=tenant.tenant_id,
            employee_id=employee.employee_id,
            photo_url=photo_url,
            embedding=vector,
            check_in_time=now,
            check_in_date=today,
            match_confidence=outcome.confidence,
        )
        logger.info(
            "Check-in recorded: attendance_id=%s employee_id=%s tenant_id=%s plan=%s",
            attendance.attendance_id,
            employee.employee_id,
            tenant.tenant_id,
            tenant.plan_type.value,
        )
        return attendance


class AttendanceQueryService:
    """Tenant-scoped reads over attendance."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        guard: TenantGuard,
        *,
        day_tz: ZoneInfo,
    ):
        self._attendance = attendance
        self._employees = employees
        self._guard = guard
        self._day_tz = day_tz

    def _owned_employee(self, tenant_id: str, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFound("Employee not found")
        self._guard.require_same_tenant(tenant_id, employee.tenant_id)
        return employee

    def _bounds(self, start: Optional[date], end: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
        # Dates are whole days in the day-boundary timezone; `end` is inclusive.
        if start and end and start > end:
            raise ValidationError("Start date must not be after end date")
        lower = start_of_day(start, self._day_tz) if start else None
        upper = start_of_day(end + timedelta(days=1), self._day_tz) - timedelta(microseconds=1) if end else None
        return lower, upper

    def list_for_employee(
        self,
        tenant_id: str,
        employee_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        page: Any = 1,
        limit: Any = None,
    ) -> Page[Attendance]:
        self._owned_employee(tenant_id, employee_id)
        page, limit, offset = normalize_page(page, limit)
        lower, upper = self._bounds(start, end)
        items, total = self._attendance.list_for_employee(
            tenant_id=tenant_id,
            employee_id=employee_id,
            start=lower,
            end=upper,
            offset=offset,
            limit=limit,
        )
        return Page(items=items, total=total, page=page, limit=limit)

    def report(
        self,
        tenant_id: str,
        *,
        start: date,
        end: date,
        employee_id: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        if start is None or end is None:
            raise ValidationError("Start date and end date are required")
        if employee_id:
            self._owned_employee(tenant_id, employee_id)
        lower, upper = self._bounds(start, end)
        return self._attendance.get_report_rows(
            tenant_id=tenant_id,
            start=lower,
            end=upper,
            employee_id=employee_id or None,
        )
