"""Application services composed from stores and the verification engine."""

from .hazard_service import (
    HazardReportService,
    HazardStatistics,
    NewHazardReport,
    SubmissionOutcome,
)
from .user_service import AuthSession, UserService

__all__ = [
    "AuthSession",
    "HazardReportService",
    "HazardStatistics",
    "NewHazardReport",
    "SubmissionOutcome",
    "UserService",
]
