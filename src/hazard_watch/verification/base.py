# Copyright 2025 msq
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Tuple

from hazard_watch.db.models import HazardReport, ReportStatus
from hazard_watch.db.store import HazardHistory


class ReportValidationError(ValueError):
    """A report lacks the fields the rules need; verification degrades to manual review."""

    def __init__(self, missing: Tuple[str, ...]) -> None:
        super().__init__(f"missing required fields: {', '.join(missing)}")
        self.missing = missing


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of one classification.

    ``reasons`` is ordered. The rule chain yields a single reason; scoring yields
    every triggered rule followed by the threshold verdict.
    """

    status: ReportStatus
    reasons: Tuple[str, ...]
    strategy: str
    score: Optional[int] = None

    @property
    def verified(self) -> bool:
        return self.status == ReportStatus.VERIFIED

    @property
    def reason(self) -> str:
        """The decisive reason: the failing check, or the final verdict for scoring."""
        if not self.reasons:
            return ""
        if self.score is None:
            return self.reasons[0]
        return self.reasons[-1]

    def as_dict(self) -> dict:
        return {
            "status": self.status.value,
            "verified": self.verified,
            "reason": self.reason,
            "reasons": list(self.reasons),
            "score": self.score,
            "strategy": self.strategy,
        }


class VerificationStrategy(Protocol):
    name: str

    def evaluate(
        self,
        report: HazardReport,
        history: HazardHistory,
        now: datetime,
    ) -> VerificationResult:
        ...
