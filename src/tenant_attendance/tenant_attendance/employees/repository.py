from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Protocol, Sequence, Tuple

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def create(
        self,
        *,
        tenant_id: str,
        name: str,
        photo_url: str,
        embedding: Sequence[float],
        salary: Decimal,
        emergency_contact_number: str,
        contact_number: str,
    ) -> Employee:
        raise NotImplementedError

    def list_for_tenant(
        self,
        tenant_id: str,
        *,
        offset: int,
        limit: int,
        search: Optional[str] = None,
    ) -> Tuple[Sequence[Employee], int]:
        """Newest first; returns (page items, total matching)."""

        raise NotImplementedError

    def update(self, employee_id: str, changes: Mapping[str, Any]) -> Optional[Employee]:
        raise NotImplementedError

    def delete_by_id(self, employee_id: str) -> bool:
        raise NotImplementedError
