# Copyright 2025 msq
from __future__ import annotations


class HazardWatchError(RuntimeError):
    """Base class for domain errors translated into HTTP responses by the routers."""


class ReportNotFoundError(HazardWatchError):
    def __init__(self, report_id: str) -> None:
        super().__init__(f"Hazard not found: {report_id}")
        self.report_id = report_id


class UserNotFoundError(HazardWatchError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class EmailAlreadyRegisteredError(HazardWatchError):
    def __init__(self, email: str) -> None:
        super().__init__("User already exists with this email")
        self.email = email


class InvalidCredentialsError(HazardWatchError):
    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class InvalidTokenError(HazardWatchError):
    """Bearer token is malformed, expired or signed with another key."""
