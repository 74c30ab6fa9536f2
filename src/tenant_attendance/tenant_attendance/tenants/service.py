from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..auth.model import TokenPair
from ..auth.passwords import PasswordHasher
from ..auth.session_store import RefreshSessionStore
from ..auth.tokens import AccessClaims, TokenCodec, hash_token
from ..common.validators import require_min_length, require_non_empty, require_username
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import PlanType, TokenKind
from ..core.exceptions import (
    AuthenticationError,
    ExpiredRefreshToken,
    ExpiredToken,
    InvalidOrRevokedRefreshToken,
    InvalidToken,
    TaxIdTaken,
    TenantNotFound,
    UsernameTaken,
    ValidationError,
)
from ..geo.fence import validate_coordinates
from .model import Tenant
from .repository import TenantRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    """What a successful register/login/refresh hands back to the client."""

    tenant: Tenant
    tokens: TokenPair

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenant": self.tenant.to_public_dict(),
            "accessToken": self.tokens.access_token,
            "refreshToken": self.tokens.refresh_token,
        }


def _parse_plan(value: Any) -> PlanType:
    if isinstance(value, PlanType):
        return value
    try:
        return PlanType(str(value).upper())
    except ValueError:
        raise ValidationError("Plan type must be FREE or PAID")


class TenantAuthService:
    """Use case: tenant registration, login, session refresh and logout."""

    def __init__(
        self,
        tenants: TenantRepository,
        sessions: RefreshSessionStore,
        codec: TokenCodec,
        hasher: PasswordHasher,
    ):
        self._tenants = tenants
        self._sessions = sessions
        self._codec = codec
        self._hasher = hasher

    def _issue_pair(self, tenant: Tenant) -> TokenPair:
        access = self._codec.issue_access(
            tenant_id=tenant.tenant_id, username=tenant.username, plan_type=tenant.plan_type
        )
        refresh = self._codec.issue_refresh(tenant_id=tenant.tenant_id)
        self._sessions.create(tenant.tenant_id, hash_token(refresh), self._codec.expiry_for(TokenKind.REFRESH))
        return TokenPair(access_token=access, refresh_token=refresh)

    def register(
        self,
        *,
        tenant_name: str,
        gst: str,
        address: str,
        latitude: Any,
        longitude: Any,
        username: str,
        password: str,
        plan_type: Any = PlanType.FREE,
    ) -> AuthSession:
        tenant_name = require_non_empty(tenant_name, "Tenant name")
        gst = require_non_empty(gst, "GST").upper()
        address = require_non_empty(address, "Address")
        lat, lon = validate_coordinates(latitude, longitude)
        username = require_username(username)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        plan = _parse_plan(plan_type or PlanType.FREE)

        if self._tenants.get_by_username(username):
            raise UsernameTaken("Username already exists")
        if self._tenants.get_by_gst(gst):
            raise TaxIdTaken("GST number already registered")

        # The unique keys still guard against a concurrent registration; the repository
        # surfaces those as the same conflict errors.
        tenant = self._tenants.create(
            tenant_name=tenant_name,
            gst=gst,
            address=address,
            latitude=lat,
            longitude=lon,
            username=username,
            password_hash=self._hasher.hash(password),
            plan_type=plan,
        )
        try:
            tokens = self._issue_pair(tenant)
        except Exception:
            # Sessions cascade with the tenant row, so a retry starts clean.
            logger.exception("Session issue failed; rolling back tenant_id=%s", tenant.tenant_id)
            self._tenants.delete_by_id(tenant.tenant_id)
            raise
        logger.info("Tenant registered: tenant_id=%s plan=%s", tenant.tenant_id, tenant.plan_type.value)
        return AuthSession(tenant=tenant, tokens=tokens)

    def login(self, username: str, password: str) -> AuthSession:
        tenant = self._tenants.get_by_username((username or "").strip())
        if not tenant or not self._hasher.verify(password or "", tenant.password_hash):
            raise AuthenticationError("Invalid username or password")

        tokens = self._issue_pair(tenant)
        logger.info("Tenant logged in: tenant_id=%s", tenant.tenant_id)
        return AuthSession(tenant=tenant, tokens=tokens)

    def refresh(self, refresh_token: str) -> AuthSession:
        try:
            claims = self._codec.verify_refresh(refresh_token)
        except ExpiredToken:
            raise ExpiredRefreshToken("Refresh token expired")
        except InvalidToken:
            raise InvalidOrRevokedRefreshToken("Invalid or revoked refresh token")

        session = self._sessions.validate(hash_token(refresh_token))
        if session.tenant_id != claims.tenant_id:
            logger.warning("Refresh token tenant mismatch: session=%s", session.session_id)
            raise InvalidOrRevokedRefreshToken("Invalid or revoked refresh token")

        tenant = self._tenants.get_by_id(session.tenant_id)
        if tenant is None:
            raise InvalidOrRevokedRefreshToken("Invalid or revoked refresh token")

        access = self._codec.issue_access(
            tenant_id=tenant.tenant_id, username=tenant.username, plan_type=tenant.plan_type
        )
        new_refresh = self._codec.issue_refresh(tenant_id=tenant.tenant_id)
        self._sessions.rotate(session, hash_token(new_refresh), self._codec.expiry_for(TokenKind.REFRESH))

        logger.info("Session refreshed: tenant_id=%s", tenant.tenant_id)
        return AuthSession(tenant=tenant, tokens=TokenPair(access_token=access, refresh_token=new_refresh))

    def authenticate(self, access_token: Optional[str]) -> AccessClaims:
        try:
            return self._codec.verify_access(access_token or "")
        except InvalidToken:
            raise AuthenticationError("Invalid or expired token")

    def logout(self, access_token: str, refresh_token: str) -> None:
        claims = self.authenticate(access_token)
        if not refresh_token:
            raise ValidationError("Refresh token is required")
        revoked = self._sessions.revoke_by_tenant_and_hash(claims.tenant_id, hash_token(refresh_token))
        logger.info("Tenant logged out: tenant_id=%s revoked=%d", claims.tenant_id, revoked)


class TenantProfileService:
    """Use case: read and edit the authenticated tenant's own record."""

    def __init__(self, tenants: TenantRepository):
        self._tenants = tenants

    def get_profile(self, tenant_id: str) -> Tenant:
        tenant = self._tenants.get_by_id(tenant_id)
        if not tenant:
            raise TenantNotFound("Tenant not found")
        return tenant

    def update_profile(self, tenant_id: str, changes: Mapping[str, Any]) -> Tenant:
        current = self.get_profile(tenant_id)
        clean: Dict[str, Any] = {}

        if "tenant_name" in changes:
            clean["tenant_name"] = require_non_empty(changes["tenant_name"], "Tenant name")
        if "address" in changes:
            clean["address"] = require_non_empty(changes["address"], "Address")
        if "plan_type" in changes:
            clean["plan_type"] = _parse_plan(changes["plan_type"])
        if "gst" in changes:
            gst = require_non_empty(changes["gst"], "GST").upper()
            if gst != current.gst:
                other = self._tenants.get_by_gst(gst)
                if other and other.tenant_id != tenant_id:
                    raise TaxIdTaken("GST number already registered")
                clean["gst"] = gst
        if "latitude" in changes or "longitude" in changes:
            lat, lon = validate_coordinates(
                changes.get("latitude", current.latitude), changes.get("longitude", current.longitude)
            )
            clean["latitude"], clean["longitude"] = lat, lon

        unknown = set(changes) - {"tenant_name", "address", "plan_type", "gst", "latitude", "longitude"}
        if unknown:
            raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")

        updated = self._tenants.update(tenant_id, clean)
        if not updated:
            raise TenantNotFound("Tenant not found")
        logger.info("Tenant profile updated: tenant_id=%s fields=%s", tenant_id, sorted(clean))
        return updated
