from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RefreshSession:
    """Một refresh token đã phát hành. Chỉ lưu hash, không bao giờ lưu token gốc."""

    session_id: str
    tenant_id: str
    token_hash: str
    expires_at: datetime
    is_revoked: bool
    created_at: datetime


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
