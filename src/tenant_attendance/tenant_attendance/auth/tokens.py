"""Signed, time-bound bearer tokens.

Three kinds exist (access, refresh, location proof). Each kind has its own
signer and secret, so a token minted for one kind never verifies as another.
Refresh tokens are stored only as `hash_token(raw)`.
"""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional

import jwt

from ..common.datetime_utils import now_utc
from ..core.constants import JWT_ALGORITHM
from ..core.enums import PlanType, TokenKind
from ..core.exceptions import ExpiredToken, InvalidToken
from ..core.settings import JWTSettings

_REGISTERED_CLAIMS = ("iat", "exp", "typ")

_PAYLOAD_FIELDS = {
    TokenKind.ACCESS: ("tenantId", "username", "planType"),
    TokenKind.REFRESH: ("tenantId", "tokenId"),
    TokenKind.LOCATION: ("tenantId", "employeeId", "latitude", "longitude"),
}


@dataclass(frozen=True)
class AccessClaims:
    tenant_id: str
    username: str
    plan_type: PlanType


@dataclass(frozen=True)
class RefreshClaims:
    tenant_id: str
    token_id: str


@dataclass(frozen=True)
class LocationClaims:
    tenant_id: str
    employee_id: str
    latitude: float
    longitude: float


class TokenSigner:
    """HMAC signer for exactly one token kind."""

    def __init__(
        self,
        kind: TokenKind,
        secret: str,
        lifetime: timedelta,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        if not secret:
            raise ValueError(f"Missing secret for {kind.value} tokens")
        self.kind = kind
        self._secret = secret
        self.lifetime = lifetime
        self._clock = clock

    def sign(self, payload: Mapping[str, Any]) -> str:
        now = self._clock()
        claims: Dict[str, Any] = dict(payload)
        claims["typ"] = self.kind.value
        claims["iat"] = int(now.timestamp())
        claims["exp"] = int((now + self.lifetime).timestamp())
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> Dict[str, Any]:
        if not isinstance(token, str) or not token:
            raise InvalidToken("Token is missing")
        try:
            # Expiry is checked against the injected clock below, not PyJWT's wall clock.
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidToken(f"Invalid {self.kind.value} token: {e}")

        if claims.get("typ") != self.kind.value:
            raise InvalidToken(f"Token is not a {self.kind.value} token")
        if int(self._clock().timestamp()) >= int(claims["exp"]):
            raise ExpiredToken(f"{self.kind.value.capitalize()} token has expired")

        return {k: v for k, v in claims.items() if k not in _REGISTERED_CLAIMS}


class TokenCodec:
    """Issues and verifies the three token kinds."""

    def __init__(self, settings: JWTSettings, *, clock: Callable[[], datetime] = now_utc):
        self._clock = clock
        self._signers = {
            TokenKind.ACCESS: TokenSigner(TokenKind.ACCESS, settings.access_secret, settings.access_expiry, clock=clock),
            TokenKind.REFRESH: TokenSigner(
                TokenKind.REFRESH, settings.refresh_secret, settings.refresh_expiry, clock=clock
            ),
            TokenKind.LOCATION: TokenSigner(
                TokenKind.LOCATION, settings.location_secret, settings.location_expiry, clock=clock
            ),
        }

    def issue(self, kind: TokenKind, payload: Mapping[str, Any]) -> str:
        missing = [f for f in _PAYLOAD_FIELDS[kind] if f not in payload]
        if missing:
            raise ValueError(f"{kind.value} token payload is missing {', '.join(missing)}")
        return self._signers[kind].sign({f: payload[f] for f in _PAYLOAD_FIELDS[kind]})

    def verify(self, kind: TokenKind, token: str) -> Dict[str, Any]:
        payload = self._signers[kind].verify(token)
        missing = [f for f in _PAYLOAD_FIELDS[kind] if f not in payload]
        if missing:
            raise InvalidToken(f"{kind.value} token is missing {', '.join(missing)}")
        return payload

    def expiry_for(self, kind: TokenKind, *, issued_at: Optional[datetime] = None) -> datetime:
        return (issued_at or self._clock()) + self._signers[kind].lifetime

    # Typed helpers used by the services.

    def issue_access(self, *, tenant_id: str, username: str, plan_type: PlanType) -> str:
        return self.issue(
            TokenKind.ACCESS,
            {"tenantId": tenant_id, "username": username, "planType": PlanType(plan_type).value},
        )

    def verify_access(self, token: str) -> AccessClaims:
        p = self.verify(TokenKind.ACCESS, token)
        try:
            plan = PlanType(p["planType"])
        except ValueError:
            raise InvalidToken("Access token carries an unknown plan type")
        return AccessClaims(tenant_id=str(p["tenantId"]), username=str(p["username"]), plan_type=plan)

    def issue_refresh(self, *, tenant_id: str) -> str:
        # A fresh random id makes every refresh token (and its hash) unique.
        return self.issue(TokenKind.REFRESH, {"tenantId": tenant_id, "tokenId": str(uuid.uuid4())})

    def verify_refresh(self, token: str) -> RefreshClaims:
        p = self.verify(TokenKind.REFRESH, token)
        return RefreshClaims(tenant_id=str(p["tenantId"]), token_id=str(p["tokenId"]))

    def issue_location(self, *, tenant_id: str, employee_id: str, latitude: float, longitude: float) -> str:
        return self.issue(
            TokenKind.LOCATION,
            {
                "tenantId": tenant_id,
                "employeeId": employee_id,
                "latitude": float(latitude),
                "longitude": float(longitude),
            },
        )

    def verify_location(self, token: str) -> LocationClaims:
        p = self.verify(TokenKind.LOCATION, token)
        return LocationClaims(
            tenant_id=str(p["tenantId"]),
            employee_id=str(p["employeeId"]),
            latitude=float(p["latitude"]),
            longitude=float(p["longitude"]),
        )


def hash_token(raw_token: str) -> str:
    """SHA-256 hex digest; the only form in which refresh tokens are stored."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()
