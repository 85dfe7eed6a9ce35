# Copyright 2025 msq
from __future__ import annotations

import structlog
from prometheus_client import Counter

from hazard_watch.clock import Clock, SystemClock
from hazard_watch.config import VerificationSettings
from hazard_watch.db.models import HazardReport, ReportStatus
from hazard_watch.db.store import HazardHistory
from hazard_watch.verification.base import (
    ReportValidationError,
    VerificationResult,
    VerificationStrategy,
)
from hazard_watch.verification.rule_chain import RuleChainStrategy
from hazard_watch.verification.rules import RuleSettings
from hazard_watch.verification.scoring import ScoringStrategy

logger = structlog.get_logger(__name__)

DEGRADED_SCORE = 50
REASON_INCOMPLETE = "Verification could not be completed: missing {fields}"
REASON_FAILED = "Automatic verification failed, pending manual review"

_verification_total = Counter(
    "hazard_verification_total",
    "Hazard report classifications by outcome",
    ["strategy", "status"],
)
_verification_degraded_total = Counter(
    "hazard_verification_degraded_total",
    "Classifications that fell back to manual review",
    ["strategy", "cause"],
)


def build_strategy(settings: VerificationSettings) -> VerificationStrategy:
    rule_settings = RuleSettings.from_settings(settings)
    if settings.strategy == ScoringStrategy.name:
        return ScoringStrategy(rule_settings)
    if settings.strategy == RuleChainStrategy.name:
        return RuleChainStrategy(rule_settings)
    raise ValueError(f"unknown verification strategy: {settings.strategy}")


class HazardVerificationEngine:
    """Classifies a freshly submitted report against the stored history.

    ``classify`` never raises: missing fields and history failures both route
    the report to pending so a human can look at it.
    """

    def __init__(self, strategy: VerificationStrategy, *, clock: Clock | None = None) -> None:
        self._strategy = strategy
        self._clock = clock or SystemClock()

    @property
    def strategy_name(self) -> str:
        return self._strategy.name

    def classify(self, report: HazardReport, history: HazardHistory) -> VerificationResult:
        strategy = self._strategy.name
        try:
            result = self._strategy.evaluate(report, history, self._clock.now())
        except ReportValidationError as exc:
            logger.warning(
                "verification_degraded",
                report_id=report.id,
                strategy=strategy,
                cause="incomplete_report",
                missing=list(exc.missing),
            )
            _verification_degraded_total.labels(strategy=strategy, cause="incomplete_report").inc()
            result = self._degraded(REASON_INCOMPLETE.format(fields=", ".join(exc.missing)))
        except Exception:
            logger.exception(
                "verification_degraded",
                report_id=report.id,
                strategy=strategy,
                cause="internal_error",
            )
            _verification_degraded_total.labels(strategy=strategy, cause="internal_error").inc()
            result = self._degraded(REASON_FAILED)

        _verification_total.labels(strategy=strategy, status=result.status.value).inc()
        logger.info(
            "hazard_report_classified",
            report_id=report.id,
            strategy=strategy,
            status=result.status.value,
            score=result.score,
            reason=result.reason,
        )
        return result

    def _degraded(self, reason: str) -> VerificationResult:
        return VerificationResult(
            status=ReportStatus.PENDING,
            reasons=(reason,),
            strategy=self._strategy.name,
            score=DEGRADED_SCORE,
        )
