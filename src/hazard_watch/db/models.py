# Copyright 2025 msq
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class HazardType(str, Enum):
    FLOOD = "flood"
    FIRE = "fire"
    EARTHQUAKE = "earthquake"
    LANDSLIDE = "landslide"
    CYCLONE = "cyclone"
    STORM = "storm"
    DROUGHT = "drought"
    OTHER = "other"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReportStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class WeatherAlertType(str, Enum):
    CYCLONE = "cyclone"
    STORM = "storm"
    HEAVY_RAIN = "heavy_rain"
    FLOOD_WARNING = "flood_warning"
    HEAT_WAVE = "heat_wave"
    OTHER = "other"


AI_VERIFIER = "AI_VERIFICATION"


@dataclass(slots=True)
class Location:
    """Point location; coordinates may be missing on records created outside the HTTP boundary."""

    latitude: Optional[float]
    longitude: Optional[float]
    address: str = ""


@dataclass(slots=True)
class HazardReport:
    """A citizen hazard report as held by the store."""

    id: str
    submitter_id: str
    type: Optional[HazardType]
    description: Optional[str]
    severity: Severity
    location: Optional[Location]
    created_at: Optional[datetime]
    status: ReportStatus = ReportStatus.PENDING
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    verification_score: Optional[int] = None
    verification_reasons: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    affected_people: Optional[int] = None
    is_emergency: bool = False
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None


@dataclass(slots=True)
class UserRecord:
    id: str
    email: str
    name: str
    phone: str
    location: Location
    password_hash: str
    created_at: datetime
    is_admin: bool = False


@dataclass(slots=True)
class WeatherAlertRecord:
    id: str
    type: WeatherAlertType
    title: str
    description: str
    severity: Severity
    location: Location
    valid_from: datetime
    valid_until: datetime
    created_at: datetime
