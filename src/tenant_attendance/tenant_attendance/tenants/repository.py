from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from ..core.enums import PlanType
from .model import Tenant


class TenantRepository(Protocol):
    """Giao diện repository cho Tenant.

    `create` and `update` raise UsernameTaken / TaxIdTaken when a unique key is hit.
    """

    def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Tenant]:
        raise NotImplementedError

    def get_by_gst(self, gst: str) -> Optional[Tenant]:
        raise NotImplementedError

    def create(
        self,
        *,
        tenant_name: str,
        gst: str,
        address: str,
        latitude: float,
        longitude: float,
        username: str,
        password_hash: str,
        plan_type: PlanType,
    ) -> Tenant:
        raise NotImplementedError

    def update(self, tenant_id: str, changes: Mapping[str, Any]) -> Optional[Tenant]:
        raise NotImplementedError

    def delete_by_id(self, tenant_id: str) -> bool:
        raise NotImplementedError
