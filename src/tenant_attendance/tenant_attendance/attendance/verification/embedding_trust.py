from __future__ import annotations

from typing import Sequence

from .base import IdentityVerifier, VerificationOutcome


class EmbeddingTrustVerifier(IdentityVerifier):
    """FREE plan.

    The server does not compare faces. The client compares the embeddings and
    the server accepts any structurally valid embedding (already checked by the
    caller). No confidence is recorded.
    """

    def verify(
        self,
        *,
        reference_photo: str,
        reference_embedding: Sequence[float],
        submitted_photo: str,
        submitted_embedding: Sequence[float],
    ) -> VerificationOutcome:
        return VerificationOutcome(accepted=True, confidence=None)
