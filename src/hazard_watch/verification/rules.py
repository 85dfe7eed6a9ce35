# Copyright 2025 msq
"""Individual verification checks shared by both strategies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import FrozenSet, List, Optional, Tuple

from hazard_watch.config import GeofenceBounds, VerificationSettings
from hazard_watch.db.models import HazardReport, HazardType
from hazard_watch.db.store import HazardHistory
from hazard_watch.geo import haversine_meters
from hazard_watch.verification.base import ReportValidationError

BLOCKLIST_TOKENS: Tuple[str, ...] = ("test", "fake", "spam", "joke", "prank", "lol", "haha")
HIGH_RISK_TYPES: FrozenSet[HazardType] = frozenset(
    {HazardType.EARTHQUAKE, HazardType.CYCLONE, HazardType.FLOOD}
)

SHORT_DESCRIPTION_CHARS = 20
DETAILED_DESCRIPTION_CHARS = 50
ACTIVE_HOURS = range(6, 23)  # 06:00 through 22:59 local

STALE_REASON_TEMPLATE = "Hazard report is too old (more than {hours:g} hours)"


@dataclass(frozen=True)
class RuleSettings:
    recency_window: timedelta = timedelta(hours=24)
    duplicate_window: timedelta = timedelta(hours=1)
    duplicate_radius_meters: float = 1000.0
    geofence: GeofenceBounds = GeofenceBounds()
    local_offset: timedelta = timedelta(minutes=330)
    blocklist: Tuple[str, ...] = field(default=BLOCKLIST_TOKENS)

    @classmethod
    def from_settings(cls, settings: VerificationSettings) -> "RuleSettings":
        return cls(
            recency_window=timedelta(hours=settings.recency_window_hours),
            duplicate_window=timedelta(minutes=settings.duplicate_window_minutes),
            duplicate_radius_meters=settings.duplicate_radius_meters,
            geofence=settings.geofence,
            local_offset=timedelta(minutes=settings.active_hours_utc_offset_minutes),
        )

    @property
    def stale_reason(self) -> str:
        return STALE_REASON_TEMPLATE.format(hours=self.recency_window.total_seconds() / 3600)


@dataclass(frozen=True)
class CheckedReport:
    """The fields every rule reads, present and with ``created_at`` in UTC."""

    report_id: str
    submitter_id: str
    type: HazardType
    description: str
    latitude: float
    longitude: float
    created_at: datetime


def as_utc(moment: datetime) -> datetime:
    # naive timestamps are taken as UTC
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def require_fields(report: HazardReport) -> CheckedReport:
    missing: List[str] = []
    if report.type is None:
        missing.append("type")
    if report.description is None or not report.description.strip():
        missing.append("description")
    latitude = report.location.latitude if report.location is not None else None
    longitude = report.location.longitude if report.location is not None else None
    if latitude is None:
        missing.append("location.latitude")
    if longitude is None:
        missing.append("location.longitude")
    if report.created_at is None:
        missing.append("created_at")
    if missing:
        raise ReportValidationError(tuple(missing))
    return CheckedReport(
        report_id=report.id,
        submitter_id=report.submitter_id,
        type=report.type,
        description=report.description,
        latitude=latitude,
        longitude=longitude,
        created_at=as_utc(report.created_at),
    )


def is_stale(report: CheckedReport, now: datetime, settings: RuleSettings) -> bool:
    return as_utc(now) - report.created_at > settings.recency_window


def is_inside_geofence(report: CheckedReport, settings: RuleSettings) -> bool:
    return settings.geofence.contains(report.latitude, report.longitude)


def find_duplicates(
    report: CheckedReport,
    history: HazardHistory,
    settings: RuleSettings,
    *,
    radius_meters: Optional[float] = None,
) -> List[HazardReport]:
    """Other reports by the same submitter and type strictly within the duplicate window.

    With ``radius_meters`` the match is further restricted to nearby reports.
    """
    window = settings.duplicate_window
    candidates = history.find_by_submitter_and_type(
        report.submitter_id,
        report.type,
        report.created_at - window,
        report.created_at + window,
    )
    duplicates: List[HazardReport] = []
    for other in candidates:
        if other.id == report.report_id or other.created_at is None:
            continue
        if abs(as_utc(other.created_at) - report.created_at) >= window:
            continue
        if radius_meters is not None and not _is_near(report, other, radius_meters):
            continue
        duplicates.append(other)
    return duplicates


def _is_near(report: CheckedReport, other: HazardReport, radius_meters: float) -> bool:
    if other.location is None or other.location.latitude is None or other.location.longitude is None:
        return False
    distance = haversine_meters(
        report.latitude,
        report.longitude,
        other.location.latitude,
        other.location.longitude,
    )
    return distance <= radius_meters


def blocked_tokens(description: str, settings: RuleSettings) -> List[str]:
    lowered = description.lower()
    return [token for token in settings.blocklist if token in lowered]


def is_active_hour(now: datetime, settings: RuleSettings) -> bool:
    local = as_utc(now).astimezone(timezone(settings.local_offset))
    return local.hour in ACTIVE_HOURS
