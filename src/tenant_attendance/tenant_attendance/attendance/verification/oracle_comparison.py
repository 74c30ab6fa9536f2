from __future__ import annotations

import logging
from typing import Sequence

from ...core.exceptions import FaceVerificationUnavailable, OracleFailure
from ...integrations.face_oracle import FaceOracle
from .base import IdentityVerifier, VerificationOutcome

logger = logging.getLogger(__name__)


class OracleComparisonVerifier(IdentityVerifier):
    """PAID plan: compare the reference photo with the submitted one through the face oracle."""

    def __init__(self, oracle: FaceOracle, *, similarity_threshold: float):
        self._oracle = oracle
        self._threshold = float(similarity_threshold)

    def verify(
        self,
        *,
        reference_photo: str,
        reference_embedding: Sequence[float],
        submitted_photo: str,
        submitted_embedding: Sequence[float],
    ) -> VerificationOutcome:
        try:
            result = self._oracle.compare(reference_photo, submitted_photo, self._threshold)
        except OracleFailure as e:
            # Never a silent pass.
            logger.error("Face oracle failed: %s", e)
            raise FaceVerificationUnavailable("Face verification failed. Please try again.") from e

        similarity = float(result.similarity)
        if not result.matched or similarity < self._threshold:
            return VerificationOutcome(accepted=False, confidence=None)
        return VerificationOutcome(accepted=True, confidence=similarity)
