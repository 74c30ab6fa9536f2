from __future__ import annotations

import logging

from ..core.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


class TenantGuard:
    """Single place where tenant isolation is enforced for tenant-scoped operations."""

    def require_same_tenant(self, authenticated_tenant_id: str, resource_tenant_id: str) -> None:
        if not authenticated_tenant_id or str(authenticated_tenant_id) != str(resource_tenant_id):
            logger.warning(
                "Tenant isolation violation attempt: authenticated=%s resource=%s",
                authenticated_tenant_id,
                resource_tenant_id,
            )
            raise AuthorizationError("Access denied")
