# Copyright 2025 msq
from __future__ import annotations

from datetime import datetime
from typing import List

from hazard_watch.db.models import HazardReport, ReportStatus
from hazard_watch.db.store import HazardHistory
from hazard_watch.verification import rules
from hazard_watch.verification.base import VerificationResult
from hazard_watch.verification.rules import RuleSettings

BASE_SCORE = 50
VERIFY_THRESHOLD = 70
REJECT_THRESHOLD = 30

INSIDE_REGION_BONUS = 20
OUTSIDE_REGION_PENALTY = -40
SPAM_PENALTY = -30
SHORT_DESCRIPTION_PENALTY = -15
DETAILED_DESCRIPTION_BONUS = 10
DUPLICATE_PENALTY = -25
ACTIVE_HOURS_BONUS = 5
HIGH_RISK_BONUS = 15

REASON_INSIDE_REGION = "Valid location inside the India service region"
REASON_OUTSIDE_REGION = "Location outside the India service region"
REASON_SPAM = "Contains potential spam keywords"
REASON_SHORT = "Description too short"
REASON_DETAILED = "Detailed description provided"
REASON_DUPLICATE = "Similar report already exists nearby"
REASON_ACTIVE_HOURS = "Reported during active hours"
REASON_HIGH_RISK = "High-priority hazard type"
REASON_AUTO_VERIFIED = "Auto-verified by automatic checks"
REASON_AUTO_REJECTED = "Auto-rejected due to low confidence"
REASON_MANUAL_REVIEW = "Requires manual review"


def clamp_score(score: int) -> int:
    return max(0, min(100, score))


class ScoringStrategy:
    """Point-based classifier.

    Every rule adds or subtracts a fixed delta from a base of 50; the clamped
    total decides the outcome: >= 70 verified, <= 30 rejected, otherwise the
    report stays pending for manual review. Stale reports are rejected outright.
    """

    name = "scoring"

    def __init__(self, settings: RuleSettings | None = None) -> None:
        self._settings = settings or RuleSettings()

    def evaluate(
        self,
        report: HazardReport,
        history: HazardHistory,
        now: datetime,
    ) -> VerificationResult:
        checked = rules.require_fields(report)
        settings = self._settings

        if rules.is_stale(checked, now, settings):
            return VerificationResult(
                status=ReportStatus.REJECTED,
                reasons=(settings.stale_reason,),
                strategy=self.name,
                score=0,
            )

        score = BASE_SCORE
        reasons: List[str] = []

        if rules.is_inside_geofence(checked, settings):
            score += INSIDE_REGION_BONUS
            reasons.append(REASON_INSIDE_REGION)
        else:
            score += OUTSIDE_REGION_PENALTY
            reasons.append(REASON_OUTSIDE_REGION)

        if rules.blocked_tokens(checked.description, settings):
            score += SPAM_PENALTY
            reasons.append(REASON_SPAM)

        length = len(checked.description)
        if length < rules.SHORT_DESCRIPTION_CHARS:
            score += SHORT_DESCRIPTION_PENALTY
            reasons.append(REASON_SHORT)
        elif length > rules.DETAILED_DESCRIPTION_CHARS:
            score += DETAILED_DESCRIPTION_BONUS
            reasons.append(REASON_DETAILED)

        duplicates = rules.find_duplicates(
            checked,
            history,
            settings,
            radius_meters=settings.duplicate_radius_meters,
        )
        if duplicates:
            score += DUPLICATE_PENALTY
            reasons.append(REASON_DUPLICATE)

        if rules.is_active_hour(now, settings):
            score += ACTIVE_HOURS_BONUS
            reasons.append(REASON_ACTIVE_HOURS)

        if checked.type in rules.HIGH_RISK_TYPES:
            score += HIGH_RISK_BONUS
            reasons.append(REASON_HIGH_RISK)

        score = clamp_score(score)
        if score >= VERIFY_THRESHOLD:
            status = ReportStatus.VERIFIED
            reasons.append(REASON_AUTO_VERIFIED)
        elif score <= REJECT_THRESHOLD:
            status = ReportStatus.REJECTED
            reasons.append(REASON_AUTO_REJECTED)
        else:
            status = ReportStatus.PENDING
            reasons.append(REASON_MANUAL_REVIEW)

        return VerificationResult(
            status=status,
            reasons=tuple(reasons),
            strategy=self.name,
            score=score,
        )
