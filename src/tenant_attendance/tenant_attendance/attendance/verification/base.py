from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class VerificationOutcome:
    accepted: bool
    confidence: Optional[float] = None


class IdentityVerifier(ABC):
    """Strategy Pattern: decide whether the person checking in is the employee on file."""

    @abstractmethod
    def verify(
        self,
        *,
        reference_photo: str,
        reference_embedding: Sequence[float],
        submitted_photo: str,
        submitted_embedding: Sequence[float],
    ) -> VerificationOutcome:
        raise NotImplementedError
