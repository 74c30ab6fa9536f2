from __future__ import annotations

import logging
import mimetypes
import uuid
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..core.exceptions import StorageFailure
from ..core.settings import AWSSettings

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    def put(self, data: bytes, content_type: str, *, folder: str = "uploads") -> str:
        raise NotImplementedError


class S3ObjectStore:
    """Durable photo storage; returns the public object URL."""

    def __init__(self, aws: AWSSettings, *, timeout_seconds: float, client=None):
        self._bucket = aws.s3_bucket
        self._region = aws.region
        self._client = client or boto3.client(
            "s3",
            region_name=aws.region,
            aws_access_key_id=aws.access_key_id or None,
            aws_secret_access_key=aws.secret_access_key or None,
            config=Config(
                connect_timeout=float(timeout_seconds),
                read_timeout=float(timeout_seconds),
                retries={"max_attempts": 2, "mode": "standard"},
            ),
        )

    @staticmethod
    def _extension(content_type: str) -> str:
        ext: Optional[str] = mimetypes.guess_extension(content_type or "")
        if ext == ".jpe":
            ext = ".jpg"
        return ext or ".bin"

    def put(self, data: bytes, content_type: str, *, folder: str = "uploads") -> str:
        if not self._bucket:
            raise StorageFailure("Object storage bucket is not configured")

        key = f"{folder.strip('/')}/{uuid.uuid4()}{self._extension(content_type)}"
        try:
            self._client.put_object(Bucket=self._bucket, Key=key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 upload failed for key %s", key, exc_info=True)
            raise StorageFailure("Failed to upload file") from e

        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"
