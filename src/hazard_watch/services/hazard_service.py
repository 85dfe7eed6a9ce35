# Copyright 2025 msq
from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import structlog

from hazard_watch.audit import AuditLogger
from hazard_watch.clock import Clock, SystemClock
from hazard_watch.db.models import (
    AI_VERIFIER,
    HazardReport,
    HazardType,
    Location,
    ReportStatus,
    Severity,
)
from hazard_watch.db.store import HazardStore
from hazard_watch.errors import ReportNotFoundError
from hazard_watch.verification import HazardVerificationEngine, VerificationResult

logger = structlog.get_logger(__name__)

RECENT_WINDOW = timedelta(hours=24)


@dataclass(slots=True)
class NewHazardReport:
    """Validated submission payload, before the store assigns an id."""

    type: HazardType
    description: str
    severity: Severity
    location: Location
    images: List[str] = field(default_factory=list)
    affected_people: Optional[int] = None
    is_emergency: bool = False
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None


@dataclass(slots=True)
class SubmissionOutcome:
    report: HazardReport
    verification: VerificationResult


@dataclass(slots=True)
class HazardStatistics:
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    by_severity: Dict[str, int]
    recent: int


class HazardReportService:
    """Submission flow and admin operations over the hazard store.

    Submissions are serialized: a report is appended and classified while
    holding one lock, so a concurrent submission from the same user always
    sees the earlier one in the history.
    """

    def __init__(
        self,
        *,
        store: HazardStore,
        engine: HazardVerificationEngine,
        clock: Clock | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._store = store
        self._engine = engine
        self._clock = clock or SystemClock()
        self._audit = audit_logger or AuditLogger()
        self._submit_lock = threading.Lock()

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    def submit(self, draft: NewHazardReport, *, submitter_id: str) -> SubmissionOutcome:
        with self._submit_lock:
            created_at = self._clock.now()
            stored = self._store.add(
                HazardReport(
                    id="",
                    submitter_id=submitter_id,
                    type=draft.type,
                    description=draft.description,
                    severity=draft.severity,
                    location=draft.location,
                    created_at=created_at,
                    images=list(draft.images),
                    affected_people=draft.affected_people,
                    is_emergency=draft.is_emergency,
                    contact_phone=draft.contact_phone,
                    contact_email=draft.contact_email,
                )
            )
            result = self._engine.classify(stored, self._store)
            updated = self._store.update(stored.id, **self._status_changes(result))

        if updated is None:
            raise ReportNotFoundError(stored.id)
        self._audit.log(
            report_id=updated.id,
            action="auto_verification",
            actor=f"system:{AI_VERIFIER}",
            data=result.as_dict(),
        )
        logger.info(
            "hazard_report_submitted",
            report_id=updated.id,
            submitter_id=submitter_id,
            hazard_type=draft.type.value,
            status=updated.status.value,
        )
        return SubmissionOutcome(report=updated, verification=result)

    def _status_changes(self, result: VerificationResult) -> Dict[str, object]:
        changes: Dict[str, object] = {
            "status": result.status,
            "verification_score": result.score,
            "verification_reasons": list(result.reasons),
        }
        if result.status != ReportStatus.PENDING:
            changes["verified_at"] = self._clock.now()
            changes["verified_by"] = AI_VERIFIER
        if result.status == ReportStatus.REJECTED:
            changes["rejection_reason"] = result.reason
        return changes

    def get(self, report_id: str) -> HazardReport:
        report = self._store.find_by_id(report_id)
        if report is None:
            raise ReportNotFoundError(report_id)
        return report

    def list(
        self,
        *,
        status: Optional[ReportStatus] = None,
        hazard_type: Optional[HazardType] = None,
        limit: Optional[int] = None,
    ) -> List[HazardReport]:
        return self._store.list(status=status, hazard_type=hazard_type, limit=limit)

    def list_for_submitter(self, submitter_id: str) -> List[HazardReport]:
        return self._store.find_by_submitter(submitter_id)

    def override_status(
        self,
        report_id: str,
        *,
        status: ReportStatus,
        admin_id: str,
        rejection_reason: Optional[str] = None,
    ) -> HazardReport:
        """Manual admin decision; the only path that changes an already classified report."""
        previous = self.get(report_id)
        updated = self._store.update(
            report_id,
            status=status,
            verified_at=self._clock.now(),
            verified_by=admin_id,
            rejection_reason=rejection_reason if status == ReportStatus.REJECTED else None,
        )
        if updated is None:
            raise ReportNotFoundError(report_id)
        self._audit.log(
            report_id=report_id,
            action="manual_override",
            actor=f"user:{admin_id}",
            data={
                "from_status": previous.status.value,
                "to_status": status.value,
                "rejection_reason": updated.rejection_reason,
            },
        )
        logger.info(
            "hazard_status_overridden",
            report_id=report_id,
            admin_id=admin_id,
            from_status=previous.status.value,
            to_status=status.value,
        )
        return updated

    def statistics(self) -> HazardStatistics:
        reports = self._store.list()
        now = self._clock.now()
        by_status = {status.value: 0 for status in ReportStatus}
        by_status.update(Counter(r.status.value for r in reports))
        by_type = Counter(r.type.value for r in reports if r.type is not None)
        by_severity = Counter(r.severity.value for r in reports)
        recent = sum(
            1
            for r in reports
            if r.created_at is not None and _as_utc(now) - _as_utc(r.created_at) <= RECENT_WINDOW
        )
        return HazardStatistics(
            total=len(reports),
            by_status=by_status,
            by_type=dict(by_type),
            by_severity=dict(by_severity),
            recent=recent,
        )


def _as_utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)
