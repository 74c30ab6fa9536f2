from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from types import ModuleType
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.datetime_utils import parse_duration
from .constants import (
    DEFAULT_ACCESS_EXPIRY,
    DEFAULT_CHECKIN_RADIUS_METERS,
    DEFAULT_EXTERNAL_TIMEOUT_SECONDS,
    DEFAULT_LOCATION_EXPIRY,
    DEFAULT_REFRESH_EXPIRY,
    DEFAULT_SIMILARITY_THRESHOLD,
)
from .exceptions import ValidationError


@dataclass(frozen=True)
class JWTSettings:
    access_secret: str
    refresh_secret: str
    location_secret: str
    access_expiry: timedelta
    refresh_expiry: timedelta
    location_expiry: timedelta


@dataclass(frozen=True)
class AWSSettings:
    region: str = "us-east-1"
    access_key_id: str = ""
    secret_access_key: str = ""
    s3_bucket: str = ""


@dataclass(frozen=True)
class AppSettings:
    """Immutable runtime configuration, built once and handed to each component."""

    secret_key: str
    db_config: dict
    jwt: JWTSettings
    aws: AWSSettings = field(default_factory=AWSSettings)
    checkin_radius_meters: float = DEFAULT_CHECKIN_RADIUS_METERS
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    external_timeout_seconds: float = DEFAULT_EXTERNAL_TIMEOUT_SECONDS
    day_boundary_tz: ZoneInfo = field(default_factory=lambda: ZoneInfo("UTC"))
    debug: bool = False
    auto_init_db: bool = False

    @classmethod
    def from_module(cls, settings: ModuleType) -> "AppSettings":
        tz_name = str(getattr(settings, "DAY_BOUNDARY_TZ", "UTC"))
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"Unknown timezone for DAY_BOUNDARY_TZ: {tz_name!r}")

        jwt = JWTSettings(
            access_secret=str(getattr(settings, "JWT_ACCESS_SECRET", "")),
            refresh_secret=str(getattr(settings, "JWT_REFRESH_SECRET", "")),
            location_secret=str(getattr(settings, "JWT_LOCATION_SECRET", "")),
            access_expiry=parse_duration(getattr(settings, "JWT_ACCESS_EXPIRY", DEFAULT_ACCESS_EXPIRY)),
            refresh_expiry=parse_duration(getattr(settings, "JWT_REFRESH_EXPIRY", DEFAULT_REFRESH_EXPIRY)),
            location_expiry=parse_duration(getattr(settings, "JWT_LOCATION_EXPIRY", DEFAULT_LOCATION_EXPIRY)),
        )
        aws = AWSSettings(
            region=str(getattr(settings, "AWS_REGION", "us-east-1")),
            access_key_id=str(getattr(settings, "AWS_ACCESS_KEY_ID", "")),
            secret_access_key=str(getattr(settings, "AWS_SECRET_ACCESS_KEY", "")),
            s3_bucket=str(getattr(settings, "AWS_S3_BUCKET", "")),
        )
        return cls(
            secret_key=str(getattr(settings, "SECRET_KEY")),
            db_config=dict(getattr(settings, "DB_CONFIG")),
            jwt=jwt,
            aws=aws,
            checkin_radius_meters=float(getattr(settings, "ALLOWED_CHECKIN_RADIUS", DEFAULT_CHECKIN_RADIUS_METERS)),
            similarity_threshold=float(
                getattr(settings, "REKOGNITION_SIMILARITY_THRESHOLD", DEFAULT_SIMILARITY_THRESHOLD)
            ),
            external_timeout_seconds=float(
                getattr(settings, "EXTERNAL_TIMEOUT_SECONDS", DEFAULT_EXTERNAL_TIMEOUT_SECONDS)
            ),
            day_boundary_tz=tz,
            debug=bool(getattr(settings, "DEBUG", False)),
            auto_init_db=bool(getattr(settings, "AUTO_INIT_DB", False)),
        )

    def require_secrets(self) -> None:
        """Fail fast when a signing secret is missing or two kinds share one."""
        secrets = {
            "JWT_ACCESS_SECRET": self.jwt.access_secret,
            "JWT_REFRESH_SECRET": self.jwt.refresh_secret,
            "JWT_LOCATION_SECRET": self.jwt.location_secret,
        }
        missing = [name for name, value in secrets.items() if not value]
        if missing:
            raise ValidationError(f"Missing required settings: {', '.join(missing)}")
        if len(set(secrets.values())) != len(secrets):
            raise ValidationError("JWT secrets must differ per token kind")
