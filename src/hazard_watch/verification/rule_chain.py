# Copyright 2025 msq
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Tuple

from hazard_watch.db.models import HazardReport, ReportStatus
from hazard_watch.db.store import HazardHistory
from hazard_watch.verification import rules
from hazard_watch.verification.base import VerificationResult
from hazard_watch.verification.rules import CheckedReport, RuleSettings

REASON_OUTSIDE_REGION = "Location is outside the India service region"
REASON_DUPLICATE = "Duplicate report from same user within the last hour"
REASON_CONTENT = "Report contains irrelevant or spam content"
REASON_VERIFIED = "Hazard verified by automatic checks"

_Check = Callable[[CheckedReport, HazardHistory, datetime], Optional[str]]


class RuleChainStrategy:
    """Boolean checks in fixed order; the first failing check rejects the report.

    Order: recency, geofence, duplicate, content. Later checks are skipped once
    one fails, so the history is only read for reports that are fresh and in region.
    """

    name = "rules"

    def __init__(self, settings: RuleSettings | None = None) -> None:
        self._settings = settings or RuleSettings()
        self._checks: Tuple[_Check, ...] = (
            self._check_recency,
            self._check_geofence,
            self._check_duplicate,
            self._check_content,
        )

    def evaluate(
        self,
        report: HazardReport,
        history: HazardHistory,
        now: datetime,
    ) -> VerificationResult:
        checked = rules.require_fields(report)
        for check in self._checks:
            reason = check(checked, history, now)
            if reason is not None:
                return VerificationResult(
                    status=ReportStatus.REJECTED,
                    reasons=(reason,),
                    strategy=self.name,
                )
        return VerificationResult(
            status=ReportStatus.VERIFIED,
            reasons=(REASON_VERIFIED,),
            strategy=self.name,
        )

    def _check_recency(self, report: CheckedReport, history: HazardHistory, now: datetime) -> Optional[str]:
        return self._settings.stale_reason if rules.is_stale(report, now, self._settings) else None

    def _check_geofence(self, report: CheckedReport, history: HazardHistory, now: datetime) -> Optional[str]:
        return None if rules.is_inside_geofence(report, self._settings) else REASON_OUTSIDE_REGION

    def _check_duplicate(self, report: CheckedReport, history: HazardHistory, now: datetime) -> Optional[str]:
        return REASON_DUPLICATE if rules.find_duplicates(report, history, self._settings) else None

    def _check_content(self, report: CheckedReport, history: HazardHistory, now: datetime) -> Optional[str]:
        return REASON_CONTENT if rules.blocked_tokens(report.description, self._settings) else None
