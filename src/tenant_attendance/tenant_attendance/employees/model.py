from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Employee:
    """Thực thể miền (domain): nhân viên, thuộc đúng một tenant."""

    employee_id: str
    tenant_id: str
    name: str
    photo_url: str
    embedding: Tuple[float, ...]
    salary: Decimal
    emergency_contact_number: str
    contact_number: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self, *, include_embedding: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.employee_id,
            "tenantId": self.tenant_id,
            "name": self.name,
            "photoUrl": self.photo_url,
            "salary": str(self.salary),
            "emergencyContactNumber": self.emergency_contact_number,
            "contactNumber": self.contact_number,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_embedding:
            data["embedding"] = list(self.embedding)
        return data
