"""Face-comparison oracle backed by AWS Rekognition.

Both images are fetched over HTTP (the stored reference photo and the photo
submitted at check-in) and sent as raw bytes to `compare_faces`. Every network
call is bounded by `timeout_seconds`; a timeout is an `OracleFailure`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import boto3
import requests
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..core.exceptions import OracleFailure
from ..core.settings import AWSSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FaceComparison:
    matched: bool
    similarity: float


class FaceOracle(Protocol):
    def compare(self, image_url_a: str, image_url_b: str, similarity_threshold: float) -> FaceComparison:
        raise NotImplementedError


class RekognitionFaceOracle:
    def __init__(self, aws: AWSSettings, *, timeout_seconds: float, client=None, http=None):
        self._timeout = float(timeout_seconds)
        self._http = http or requests.Session()
        self._client = client or boto3.client(
            "rekognition",
            region_name=aws.region,
            aws_access_key_id=aws.access_key_id or None,
            aws_secret_access_key=aws.secret_access_key or None,
            config=Config(
                connect_timeout=self._timeout,
                read_timeout=self._timeout,
                retries={"max_attempts": 2, "mode": "standard"},
            ),
        )

    def _download(self, url: str) -> bytes:
        try:
            resp = self._http.get(url, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("Failed to download image for face comparison: %s", e)
            raise OracleFailure("Failed to download image from URL") from e
        return resp.content

    def compare(self, image_url_a: str, image_url_b: str, similarity_threshold: float) -> FaceComparison:
        source = self._download(image_url_a)
        target = self._download(image_url_b)

        try:
            response = self._client.compare_faces(
                SourceImage={"Bytes": source},
                TargetImage={"Bytes": target},
                SimilarityThreshold=float(similarity_threshold),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Rekognition compare_faces failed", exc_info=True)
            raise OracleFailure("Failed to compare faces") from e

        matches = response.get("FaceMatches") or []
        if not matches or not matches[0].get("Similarity"):
            return FaceComparison(matched=False, similarity=0.0)

        similarity = float(matches[0]["Similarity"])
        return FaceComparison(matched=similarity >= similarity_threshold, similarity=similarity)
