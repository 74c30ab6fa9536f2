from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Tuple

from .model import Attendance, AttendanceReportRow


class AttendanceRepository(Protocol):
    def find_since(self, employee_id: str, since: datetime) -> Optional[Attendance]:
        """Any check-in of this employee at or after `since`."""

        raise NotImplementedError

    def create_checkin(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        photo_url: str,
        embedding: Sequence[float],
        check_in_time: datetime,
        check_in_date: date,
        match_confidence: Optional[float] = None,
    ) -> Attendance:
        """Raises AlreadyCheckedInToday when (employee_id, check_in_date) already exists."""

        raise NotImplementedError

    def list_for_employee(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        start: Optional[datetime],
        end: Optional[datetime],
        offset: int,
        limit: int,
    ) -> Tuple[Sequence[Attendance], int]:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        tenant_id: str,
        start: datetime,
        end: datetime,
        employee_id: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
