# Copyright 2025 msq
from __future__ import annotations

import copy
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Sequence

import structlog

from hazard_watch.db.models import (
    HazardReport,
    HazardType,
    ReportStatus,
    UserRecord,
    WeatherAlertRecord,
)

logger = structlog.get_logger(__name__)

_IMMUTABLE_REPORT_FIELDS = frozenset({"id", "submitter_id", "created_at"})
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class HazardHistory(Protocol):
    """Read side used by the verification engine's duplicate check."""

    def find_by_submitter_and_type(
        self,
        submitter_id: str,
        hazard_type: HazardType,
        window_start: datetime,
        window_end: datetime,
    ) -> Sequence[HazardReport]:
        ...


class HazardStore(HazardHistory, Protocol):
    def add(self, report: HazardReport) -> HazardReport:
        ...

    def find_by_id(self, report_id: str) -> Optional[HazardReport]:
        ...

    def find_by_submitter(self, submitter_id: str) -> List[HazardReport]:
        ...

    def list(
        self,
        *,
        status: Optional[ReportStatus] = None,
        hazard_type: Optional[HazardType] = None,
        limit: Optional[int] = None,
    ) -> List[HazardReport]:
        ...

    def update(self, report_id: str, **changes: Any) -> Optional[HazardReport]:
        ...


def _as_utc(moment: datetime) -> datetime:
    # naive timestamps are taken as UTC
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _newest_first(report: HazardReport) -> datetime:
    return _as_utc(report.created_at) if report.created_at is not None else _OLDEST


class InMemoryHazardStore:
    """Process-local hazard store.

    Every read returns copies; the only way to change a stored report is ``update``.
    """

    def __init__(self) -> None:
        self._reports: Dict[str, HazardReport] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def add(self, report: HazardReport) -> HazardReport:
        with self._lock:
            report_id = str(self._next_id)
            self._next_id += 1
            stored = replace(copy.deepcopy(report), id=report_id)
            self._reports[report_id] = stored
            logger.debug("hazard_report_stored", report_id=report_id, submitter_id=stored.submitter_id)
            return copy.deepcopy(stored)

    def find_by_id(self, report_id: str) -> Optional[HazardReport]:
        with self._lock:
            report = self._reports.get(report_id)
            return copy.deepcopy(report) if report is not None else None

    def find_by_submitter(self, submitter_id: str) -> List[HazardReport]:
        with self._lock:
            matches = [r for r in self._reports.values() if r.submitter_id == submitter_id]
            return [copy.deepcopy(r) for r in sorted(matches, key=_newest_first, reverse=True)]

    def list(
        self,
        *,
        status: Optional[ReportStatus] = None,
        hazard_type: Optional[HazardType] = None,
        limit: Optional[int] = None,
    ) -> List[HazardReport]:
        with self._lock:
            reports = sorted(self._reports.values(), key=_newest_first, reverse=True)
            if status is not None:
                reports = [r for r in reports if r.status == status]
            if hazard_type is not None:
                reports = [r for r in reports if r.type == hazard_type]
            if limit is not None:
                reports = reports[: max(limit, 0)]
            return [copy.deepcopy(r) for r in reports]

    def find_by_submitter_and_type(
        self,
        submitter_id: str,
        hazard_type: HazardType,
        window_start: datetime,
        window_end: datetime,
    ) -> List[HazardReport]:
        start, end = _as_utc(window_start), _as_utc(window_end)
        with self._lock:
            return [
                copy.deepcopy(r)
                for r in self._reports.values()
                if r.submitter_id == submitter_id
                and r.type == hazard_type
                and r.created_at is not None
                and start <= _as_utc(r.created_at) <= end
            ]

    def update(self, report_id: str, **changes: Any) -> Optional[HazardReport]:
        forbidden = _IMMUTABLE_REPORT_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"immutable fields cannot be updated: {sorted(forbidden)}")
        with self._lock:
            current = self._reports.get(report_id)
            if current is None:
                return None
            updated = replace(current, **changes)
            self._reports[report_id] = updated
            return copy.deepcopy(updated)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)


class InMemoryUserStore:
    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def add(self, user: UserRecord) -> UserRecord:
        with self._lock:
            user_id = str(self._next_id)
            self._next_id += 1
            stored = replace(copy.deepcopy(user), id=user_id)
            self._users[user_id] = stored
            return copy.deepcopy(stored)

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        needle = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email.lower() == needle:
                    return copy.deepcopy(user)
        return None

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user is not None else None

    def update(self, user_id: str, **changes: Any) -> Optional[UserRecord]:
        if "id" in changes:
            raise ValueError("user id cannot be updated")
        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            updated = replace(current, **changes)
            self._users[user_id] = updated
            return copy.deepcopy(updated)


class InMemoryWeatherAlertStore:
    def __init__(self) -> None:
        self._alerts: Dict[str, WeatherAlertRecord] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def add(self, alert: WeatherAlertRecord) -> WeatherAlertRecord:
        with self._lock:
            alert_id = str(self._next_id)
            self._next_id += 1
            stored = replace(copy.deepcopy(alert), id=alert_id)
            self._alerts[alert_id] = stored
            return copy.deepcopy(stored)

    def list_all(self) -> List[WeatherAlertRecord]:
        with self._lock:
            alerts = sorted(self._alerts.values(), key=lambda a: a.created_at, reverse=True)
            return [copy.deepcopy(a) for a in alerts]

    def list_active(self, at: datetime) -> List[WeatherAlertRecord]:
        with self._lock:
            return [
                copy.deepcopy(a)
                for a in self._alerts.values()
                if a.valid_from <= at <= a.valid_until
            ]
