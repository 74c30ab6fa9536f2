from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ..common.datetime_utils import now_utc
from ..core.exceptions import SessionExpired, SessionNotFound, SessionRevoked
from .model import RefreshSession
from .repository import RefreshSessionRepository

logger = logging.getLogger(__name__)


class RefreshSessionStore:
    """Authoritative answer to "may this refresh token still be exchanged?".

    Rotation and logout never delete rows, they only flip `is_revoked`; an
    expired-but-unrevoked row is rejected when it is looked up.
    """

    def __init__(self, sessions: RefreshSessionRepository, *, clock: Callable[[], datetime] = now_utc):
        self._sessions = sessions
        self._clock = clock

    def create(self, tenant_id: str, token_hash: str, expires_at: datetime) -> RefreshSession:
        return self._sessions.insert(
            tenant_id=tenant_id,
            token_hash=token_hash,
            expires_at=expires_at,
            created_at=self._clock(),
        )

    def validate(self, token_hash: str) -> RefreshSession:
        session = self._sessions.get_by_hash(token_hash)
        if session is None:
            raise SessionNotFound("Invalid or revoked refresh token")
        if session.is_revoked:
            raise SessionRevoked("Invalid or revoked refresh token")
        if self._clock() >= session.expires_at:
            raise SessionExpired("Refresh token expired")
        return session

    def revoke(self, session_id: str) -> None:
        self._sessions.mark_revoked(session_id)

    def revoke_by_tenant_and_hash(self, tenant_id: str, token_hash: str) -> int:
        return self._sessions.revoke_by_tenant_and_hash(tenant_id, token_hash)

    def rotate(self, session: RefreshSession, new_token_hash: str, new_expires_at: datetime) -> RefreshSession:
        """Revoke `session` and create its replacement as one transaction."""
        replacement = self._sessions.rotate(
            old_session_id=session.session_id,
            tenant_id=session.tenant_id,
            new_token_hash=new_token_hash,
            new_expires_at=new_expires_at,
            created_at=self._clock(),
        )
        if replacement is None:
            logger.warning("Refresh session %s was already rotated", session.session_id)
            raise SessionRevoked("Invalid or revoked refresh token")
        return replacement
