# Copyright 2025 msq
"""Request/response models of the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, NonNegativeInt, model_validator

from hazard_watch.db.models import (
    HazardReport,
    HazardType,
    Location,
    ReportStatus,
    Severity,
    UserRecord,
    WeatherAlertRecord,
    WeatherAlertType,
)
from hazard_watch.verification import VerificationResult

INDIAN_PHONE_PATTERN = r"^\+91[6-9]\d{9}$"


class LocationModel(BaseModel):
    # global ranges only; the service region is enforced by the verification engine
    latitude: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    address: str = Field(..., min_length=1, description="Human-readable address")

    def to_record(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude, address=self.address)

    @classmethod
    def from_record(cls, location: Location) -> "LocationModel":
        return cls(
            latitude=location.latitude,
            longitude=location.longitude,
            address=location.address or "-",
        )


class RegionLocationModel(LocationModel):
    """Home location of a user; must lie inside the service region."""

    latitude: float = Field(..., ge=6.0, le=37.0)
    longitude: float = Field(..., ge=68.0, le=97.0)


# ========== hazards ==========


class HazardCreateRequest(BaseModel):
    type: HazardType
    description: str = Field(..., min_length=10, max_length=500)
    location: LocationModel
    severity: Severity
    images: List[str] = Field(default_factory=list, max_length=5)
    affected_people: Optional[NonNegativeInt] = None
    is_emergency: bool = False
    contact_phone: Optional[str] = Field(None, max_length=20)
    contact_email: Optional[EmailStr] = None


class HazardResponse(BaseModel):
    id: str
    submitter_id: str
    type: Optional[HazardType]
    description: Optional[str]
    severity: Severity
    location: Optional[LocationModel]
    status: ReportStatus
    created_at: Optional[datetime]
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    verification_score: Optional[int] = None
    verification_reasons: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    affected_people: Optional[int] = None
    is_emergency: bool = False

    @classmethod
    def from_record(cls, report: HazardReport) -> "HazardResponse":
        location = None
        if (
            report.location is not None
            and report.location.latitude is not None
            and report.location.longitude is not None
        ):
            location = LocationModel.from_record(report.location)
        return cls(
            id=report.id,
            submitter_id=report.submitter_id,
            type=report.type,
            description=report.description,
            severity=report.severity,
            location=location,
            status=report.status,
            created_at=report.created_at,
            verified_at=report.verified_at,
            verified_by=report.verified_by,
            rejection_reason=report.rejection_reason,
            verification_score=report.verification_score,
            verification_reasons=list(report.verification_reasons),
            images=list(report.images),
            affected_people=report.affected_people,
            is_emergency=report.is_emergency,
        )


class VerificationResponse(BaseModel):
    status: ReportStatus
    verified: bool
    reason: str
    reasons: List[str]
    score: Optional[int] = None
    strategy: str

    @classmethod
    def from_result(cls, result: VerificationResult) -> "VerificationResponse":
        return cls(
            status=result.status,
            verified=result.verified,
            reason=result.reason,
            reasons=list(result.reasons),
            score=result.score,
            strategy=result.strategy,
        )


class HazardSubmitResponse(BaseModel):
    message: str = "Hazard report submitted successfully"
    hazard: HazardResponse
    verification: VerificationResponse


class HazardListResponse(BaseModel):
    hazards: List[HazardResponse]


class HazardDetailResponse(BaseModel):
    hazard: HazardResponse


class StatusUpdateRequest(BaseModel):
    status: ReportStatus
    rejection_reason: Optional[str] = Field(None, max_length=500)


class StatusUpdateResponse(BaseModel):
    message: str = "Hazard status updated successfully"
    hazard: HazardResponse


class StatisticsModel(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    by_severity: Dict[str, int]
    recent: int


class StatisticsResponse(BaseModel):
    statistics: StatisticsModel


# ========== auth ==========


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = Field(..., pattern=INDIAN_PHONE_PATTERN)
    location: RegionLocationModel


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone: Optional[str] = Field(None, pattern=INDIAN_PHONE_PATTERN)
    location: Optional[RegionLocationModel] = None


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    phone: str
    location: LocationModel
    created_at: datetime
    is_admin: bool

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            phone=user.phone,
            location=LocationModel.from_record(user.location),
            created_at=user.created_at,
            is_admin=user.is_admin,
        )


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    token: str


class UserEnvelope(BaseModel):
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


# ========== weather ==========


class WeatherAlertCreateRequest(BaseModel):
    type: WeatherAlertType
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=10, max_length=500)
    severity: Severity
    location: RegionLocationModel
    valid_from: datetime
    valid_until: datetime

    @model_validator(mode="after")
    def _check_validity_window(self) -> "WeatherAlertCreateRequest":
        if self.valid_until <= self.valid_from:
            raise ValueError("valid_until must be later than valid_from")
        return self


class WeatherAlertResponse(BaseModel):
    id: str
    type: WeatherAlertType
    title: str
    description: str
    severity: Severity
    location: LocationModel
    valid_from: datetime
    valid_until: datetime
    created_at: datetime

    @classmethod
    def from_record(cls, alert: WeatherAlertRecord) -> "WeatherAlertResponse":
        return cls(
            id=alert.id,
            type=alert.type,
            title=alert.title,
            description=alert.description,
            severity=alert.severity,
            location=LocationModel.from_record(alert.location),
            valid_from=alert.valid_from,
            valid_until=alert.valid_until,
            created_at=alert.created_at,
        )
