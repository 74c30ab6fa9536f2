from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Attendance:
    """Thực thể miền (domain): một lần chấm công (check-in).

    `check_in_date` is the calendar day of `check_in_time` in the configured
    day-boundary timezone; (employee_id, check_in_date) is unique.
    """

    attendance_id: str
    tenant_id: str
    employee_id: str
    photo_url: str
    embedding: Tuple[float, ...]
    check_in_time: datetime
    check_in_date: date
    match_confidence: Optional[float] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.attendance_id,
            "tenantId": self.tenant_id,
            "employeeId": self.employee_id,
            "photoUrl": self.photo_url,
            "checkInTime": self.check_in_time.isoformat(),
            "checkInDate": self.check_in_date.isoformat(),
            "matchConfidence": self.match_confidence,
        }


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model phục vụ báo cáo (tối ưu cho truy vấn)."""

    attendance: Attendance
    employee_name: str
    contact_number: str

    def to_dict(self) -> Dict[str, Any]:
        data = self.attendance.to_dict()
        data["employee"] = {
            "id": self.attendance.employee_id,
            "name": self.employee_name,
            "contactNumber": self.contact_number,
        }
        return data


@dataclass(frozen=True)
class LocationCheckResult:
    success: bool
    message: str
    location_token: Optional[str] = None
    tenant_id: Optional[str] = None
    tenant_name: Optional[str] = None
    address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.location_token:
            data.update(
                {
                    "locationToken": self.location_token,
                    "tenantId": self.tenant_id,
                    "tenantName": self.tenant_name,
                    "address": self.address,
                }
            )
        return data
