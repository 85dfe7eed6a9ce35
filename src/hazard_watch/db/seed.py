# Copyright 2025 msq
"""Sample data for local runs and demos."""

from __future__ import annotations

from datetime import timedelta

import structlog

from hazard_watch.auth.security import hash_password
from hazard_watch.clock import Clock
from hazard_watch.db.models import (
    AI_VERIFIER,
    HazardReport,
    HazardType,
    Location,
    ReportStatus,
    Severity,
    UserRecord,
    WeatherAlertRecord,
    WeatherAlertType,
)
from hazard_watch.db.store import (
    HazardStore,
    InMemoryUserStore,
    InMemoryWeatherAlertStore,
)

logger = structlog.get_logger(__name__)

SAMPLE_ADMIN_EMAIL = "admin@hazardapp.com"
SAMPLE_ADMIN_PASSWORD = "admin123"


def seed_sample_data(
    *,
    hazards: HazardStore,
    users: InMemoryUserStore,
    alerts: InMemoryWeatherAlertStore,
    clock: Clock,
) -> None:
    now = clock.now()
    delhi = Location(latitude=28.6139, longitude=77.2090, address="New Delhi, India")

    admin = users.add(
        UserRecord(
            id="",
            email=SAMPLE_ADMIN_EMAIL,
            name="Admin User",
            phone="+919876543210",
            location=delhi,
            password_hash=hash_password(SAMPLE_ADMIN_PASSWORD),
            created_at=now,
            is_admin=True,
        )
    )

    hazards.add(
        HazardReport(
            id="",
            submitter_id=admin.id,
            type=HazardType.FLOOD,
            description="Heavy flooding in low-lying areas near Yamuna river",
            severity=Severity.HIGH,
            location=delhi,
            created_at=now - timedelta(hours=2),
            status=ReportStatus.VERIFIED,
            verified_at=now - timedelta(hours=1),
            verified_by=AI_VERIFIER,
        )
    )
    hazards.add(
        HazardReport(
            id="",
            submitter_id=admin.id,
            type=HazardType.FIRE,
            description="Building fire reported in commercial area",
            severity=Severity.MEDIUM,
            location=Location(latitude=19.0760, longitude=72.8777, address="Mumbai, India"),
            created_at=now - timedelta(minutes=30),
        )
    )

    alerts.add(
        WeatherAlertRecord(
            id="",
            type=WeatherAlertType.CYCLONE,
            title="Cyclone Warning",
            description="Cyclone approaching coastal areas of Odisha",
            severity=Severity.HIGH,
            location=Location(latitude=20.2961, longitude=85.8245, address="Odisha, India"),
            valid_from=now,
            valid_until=now + timedelta(hours=24),
            created_at=now,
        )
    )
    logger.info("sample_data_seeded", users=1, hazards=2, alerts=1)
