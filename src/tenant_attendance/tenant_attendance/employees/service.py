from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..attendance.model import Attendance
from ..attendance.repository import AttendanceRepository
from ..auth.guard import TenantGuard
from ..common.datetime_utils import now_utc
from ..common.pagination import Page, normalize_page
from ..common.validators import require_embedding, require_non_empty, require_non_negative_decimal
from ..core.constants import EMPLOYEE_HISTORY_DAYS, MAX_PAGE_SIZE
from ..core.exceptions import EmployeeNotFound, TenantNotFound, ValidationError
from ..tenants.repository import TenantRepository
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

_STRING_FIELDS = {
    "name": "Name",
    "photo_url": "Photo URL",
    "emergency_contact_number": "Emergency contact number",
    "contact_number": "Contact number",
}


@dataclass(frozen=True)
class EmployeeDetails:
    employee: Employee
    recent_attendance: Sequence[Attendance]


class EmployeeService:
    """Use case: a tenant manages its own employees."""

    def __init__(
        self,
        employees: EmployeeRepository,
        tenants: TenantRepository,
        attendance: AttendanceRepository,
        guard: TenantGuard,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._employees = employees
        self._tenants = tenants
        self._attendance = attendance
        self._guard = guard
        self._clock = clock

    def _owned(self, tenant_id: str, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFound("Employee not found")
        self._guard.require_same_tenant(tenant_id, employee.tenant_id)
        return employee

    def register(
        self,
        tenant_id: str,
        *,
        name: str,
        photo_url: str,
        embedding: Any,
        salary: Any,
        emergency_contact_number: str,
        contact_number: str,
    ) -> Employee:
        embedding = require_embedding(embedding)
        fields = {
            key: require_non_empty(value, _STRING_FIELDS[key])
            for key, value in (
                ("name", name),
                ("photo_url", photo_url),
                ("emergency_contact_number", emergency_contact_number),
                ("contact_number", contact_number),
            )
        }
        amount = require_non_negative_decimal(salary, "Salary")

        if not self._tenants.get_by_id(tenant_id):
            raise TenantNotFound("Tenant not found")

        employee = self._employees.create(tenant_id=tenant_id, embedding=embedding, salary=amount, **fields)
        logger.info("Employee registered: employee_id=%s tenant_id=%s", employee.employee_id, tenant_id)
        return employee

    def get_details(self, tenant_id: str, employee_id: str) -> EmployeeDetails:
        """Employee record plus its check-ins over the last month, newest first."""
        employee = self._owned(tenant_id, employee_id)
        since = self._clock() - timedelta(days=EMPLOYEE_HISTORY_DAYS)
        rows, _ = self._attendance.list_for_employee(
            tenant_id=tenant_id,
            employee_id=employee_id,
            start=since,
            end=None,
            offset=0,
            # A month holds at most one check-in per day.
            limit=MAX_PAGE_SIZE,
        )
        return EmployeeDetails(employee=employee, recent_attendance=rows)

    def list(self, tenant_id: str, *, page: Any = 1, limit: Any = None, search: Optional[str] = None) -> Page[Employee]:
        page, limit, offset = normalize_page(page, limit)
        search = search.strip() if isinstance(search, str) and search.strip() else None
        items, total = self._employees.list_for_tenant(tenant_id, offset=offset, limit=limit, search=search)
        return Page(items=items, total=total, page=page, limit=limit)

    def update(self, tenant_id: str, employee_id: str, changes: Mapping[str, Any]) -> Employee:
        self._owned(tenant_id, employee_id)

        clean: Dict[str, Any] = {}
        for key, value in changes.items():
            if key in _STRING_FIELDS:
                clean[key] = require_non_empty(value, _STRING_FIELDS[key])
            elif key == "embedding":
                clean[key] = require_embedding(value)
            elif key == "salary":
                clean[key] = require_non_negative_decimal(value, "Salary")
            else:
                raise ValidationError(f"Cannot update: {key}")

        updated = self._employees.update(employee_id, clean)
        if not updated:
            raise EmployeeNotFound("Employee not found")
        logger.info("Employee updated: employee_id=%s tenant_id=%s", employee_id, tenant_id)
        return updated

    def delete(self, tenant_id: str, employee_id: str) -> None:
        self._owned(tenant_id, employee_id)
        if not self._employees.delete_by_id(employee_id):
            raise EmployeeNotFound("Employee not found")
        logger.info("Employee deleted: employee_id=%s tenant_id=%s", employee_id, tenant_id)
