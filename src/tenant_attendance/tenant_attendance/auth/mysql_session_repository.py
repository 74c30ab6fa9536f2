from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import from_db, to_db
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import RefreshSession
from .repository import RefreshSessionRepository


def _row_to_session(r: Dict[str, Any]) -> RefreshSession:
    return RefreshSession(
        session_id=str(r["session_id"]),
        tenant_id=str(r["tenant_id"]),
        token_hash=r["token_hash"],
        expires_at=from_db(r["expires_at"]),
        is_revoked=bool(r["is_revoked"]),
        created_at=from_db(r["created_at"]),
    )


class _RollbackRotation(Exception):
    """Aborts the rotation transaction when the old row is no longer active."""


class MySQLRefreshSessionRepository(RefreshSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _insert(cur, *, tenant_id: str, token_hash: str, expires_at: datetime, created_at: datetime) -> RefreshSession:
        session_id = str(uuid.uuid4())
        cur.execute(
            """
            INSERT INTO refresh_tokens(session_id, tenant_id, token_hash, expires_at, is_revoked, created_at)
            VALUES(%s,%s,%s,%s,0,%s)
            """,
            (session_id, tenant_id, token_hash, to_db(expires_at), to_db(created_at)),
        )
        return RefreshSession(
            session_id=session_id,
            tenant_id=tenant_id,
            token_hash=token_hash,
            expires_at=expires_at,
            is_revoked=False,
            created_at=created_at,
        )

    def insert(self, *, tenant_id: str, token_hash: str, expires_at: datetime, created_at: datetime) -> RefreshSession:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._insert(cur, tenant_id=tenant_id, token_hash=token_hash, expires_at=expires_at, created_at=created_at)

    def get_by_hash(self, token_hash: str) -> Optional[RefreshSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, tenant_id, token_hash, expires_at, is_revoked, created_at
                FROM refresh_tokens
                WHERE token_hash=%s
                """,
                (token_hash,),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def mark_revoked(self, session_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE refresh_tokens SET is_revoked=1 WHERE session_id=%s", (session_id,))
            return cur.rowcount > 0

    def revoke_by_tenant_and_hash(self, tenant_id: str, token_hash: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE refresh_tokens SET is_revoked=1 WHERE tenant_id=%s AND token_hash=%s AND is_revoked=0",
                (tenant_id, token_hash),
            )
            return int(cur.rowcount)

    def rotate(
        self,
        *,
        old_session_id: str,
        tenant_id: str,
        new_token_hash: str,
        new_expires_at: datetime,
        created_at: datetime,
    ) -> Optional[RefreshSession]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # Conditional revoke: a concurrent rotation of the same row leaves rowcount=0.
                cur.execute(
                    "UPDATE refresh_tokens SET is_revoked=1 WHERE session_id=%s AND is_revoked=0",
                    (old_session_id,),
                )
                if cur.rowcount != 1:
                    raise _RollbackRotation()
                return self._insert(
                    cur,
                    tenant_id=tenant_id,
                    token_hash=new_token_hash,
                    expires_at=new_expires_at,
                    created_at=created_at,
                )
        except _RollbackRotation:
            return None
