from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import PlanType


@dataclass(frozen=True)
class Tenant:
    """Thực thể miền (domain): công ty thuê dịch vụ, đồng thời là tài khoản đăng nhập.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    """

    tenant_id: str
    tenant_name: str
    gst: str
    address: str
    latitude: float
    longitude: float
    username: str
    password_hash: str
    plan_type: PlanType
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": self.tenant_id,
            "tenantName": self.tenant_name,
            "gst": self.gst,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "username": self.username,
            "planType": self.plan_type.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
