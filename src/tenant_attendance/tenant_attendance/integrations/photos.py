from __future__ import annotations

import logging

from ..auth.tokens import TokenCodec
from ..core.exceptions import InvalidOrExpiredLocationToken, InvalidToken, ValidationError
from .storage import ObjectStore

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}
MAX_PHOTO_BYTES = 5 * 1024 * 1024


class PhotoService:
    """Use case: store reference photos (tenant) and check-in photos (location-proof holder)."""

    def __init__(self, store: ObjectStore, codec: TokenCodec):
        self._store = store
        self._codec = codec

    @staticmethod
    def _check(data: bytes, content_type: str) -> None:
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Photo must be a JPEG, PNG or WebP image")
        if not data:
            raise ValidationError("Photo is empty")
        if len(data) > MAX_PHOTO_BYTES:
            raise ValidationError("Photo is larger than 5 MB")

    def upload_employee_photo(self, tenant_id: str, data: bytes, content_type: str) -> str:
        self._check(data, content_type)
        url = self._store.put(data, content_type, folder=f"employees/{tenant_id}")
        logger.info("Employee photo stored: tenant_id=%s", tenant_id)
        return url

    def upload_attendance_photo(self, location_token: str, data: bytes, content_type: str) -> str:
        try:
            proof = self._codec.verify_location(location_token)
        except InvalidToken:
            raise InvalidOrExpiredLocationToken("Invalid or expired location token")
        self._check(data, content_type)
        url = self._store.put(data, content_type, folder=f"attendance/{proof.tenant_id}")
        logger.info("Check-in photo stored: employee_id=%s", proof.employee_id)
        return url
