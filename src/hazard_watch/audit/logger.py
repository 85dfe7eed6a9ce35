# Copyright 2025 msq
from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class AuditEntry:
    """One status decision on a hazard report.

    Both the automatic verifier and admin overrides append here, so the full
    status history of a report can be replayed.
    """
    timestamp: str
    report_id: str
    action: str
    actor: str
    data: Dict[str, Any]
    error: Optional[str] = None


class AuditLogger:
    """Append-only audit trail of report status decisions.

    - automatic classifications
    - manual admin overrides
    - lookup by report
    """

    def __init__(self) -> None:
        self._entries: List[AuditEntry] = []
        self._lock = threading.Lock()

    def log(
        self,
        *,
        report_id: str,
        action: str,
        actor: str,
        data: Dict[str, Any],
        error: Optional[str] = None,
    ) -> None:
        """Record an entry.

        Args:
            report_id: hazard report id
            action: e.g. "auto_verification", "manual_override"
            actor: e.g. "system:AI_VERIFICATION", "user:1"
            data: decision payload (status, reasons, score)
            error: failure detail, if any
        """
        entry = AuditEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            report_id=report_id,
            action=action,
            actor=actor,
            data=data,
            error=error,
        )
        with self._lock:
            self._entries.append(entry)

        logger.info("audit_entry_recorded", report_id=report_id, action=action, actor=actor)

    def get_trail(self, report_id: str) -> List[Dict[str, Any]]:
        """Entries for one report, oldest first."""
        with self._lock:
            entries = [asdict(entry) for entry in self._entries if entry.report_id == report_id]
        return sorted(entries, key=lambda x: x["timestamp"])
