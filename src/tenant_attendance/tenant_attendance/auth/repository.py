from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import RefreshSession


class RefreshSessionRepository(Protocol):
    """Persistence for refresh sessions.

    `rotate` must be atomic: the old row is revoked and the new row inserted in
    one transaction, or neither happens.
    """

    def insert(self, *, tenant_id: str, token_hash: str, expires_at: datetime, created_at: datetime) -> RefreshSession:
        raise NotImplementedError

    def get_by_hash(self, token_hash: str) -> Optional[RefreshSession]:
        raise NotImplementedError

    def mark_revoked(self, session_id: str) -> bool:
        raise NotImplementedError

    def revoke_by_tenant_and_hash(self, tenant_id: str, token_hash: str) -> int:
        raise NotImplementedError

    def rotate(
        self,
        *,
        old_session_id: str,
        tenant_id: str,
        new_token_hash: str,
        new_expires_at: datetime,
        created_at: datetime,
    ) -> Optional[RefreshSession]:
        """Returns the new session, or None when the old one was already revoked (nothing written)."""

        raise NotImplementedError
