from __future__ import annotations

from ...core.enums import PlanType
from .base import IdentityVerifier
from .embedding_trust import EmbeddingTrustVerifier
from .oracle_comparison import OracleComparisonVerifier


class VerifierFactory:
    """Factory Pattern: one verifier per plan tier, chosen once per check-in."""

    def __init__(self, *, free: IdentityVerifier, paid: IdentityVerifier):
        self._by_plan = {PlanType.FREE: free, PlanType.PAID: paid}

    @classmethod
    def default(cls, oracle, *, similarity_threshold: float) -> "VerifierFactory":
        return cls(
            free=EmbeddingTrustVerifier(),
            paid=OracleComparisonVerifier(oracle, similarity_threshold=similarity_threshold),
        )

    def for_plan(self, plan: PlanType) -> IdentityVerifier:
        return self._by_plan[PlanType(plan)]
