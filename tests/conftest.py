from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, os.fspath(ROOT / "src"))

from hazard_watch.clock import FixedClock  # noqa: E402
from hazard_watch.db.models import HazardReport, HazardType, Location, Severity  # noqa: E402
from hazard_watch.db.store import InMemoryHazardStore  # noqa: E402

# 12:00 in India (UTC+05:30), inside the active-hours window
NOW = datetime(2025, 3, 10, 6, 30, tzinfo=timezone.utc)

FLOOD_DESCRIPTION = "Heavy flooding reported near river, water level rising fast"


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def hazard_store() -> InMemoryHazardStore:
    return InMemoryHazardStore()


@pytest.fixture()
def make_report() -> Callable[..., HazardReport]:
    """Factory for reports; defaults to a fresh flood report in Delhi."""

    def _make(
        *,
        report_id: str = "100",
        submitter_id: str = "user-1",
        hazard_type: HazardType | None = HazardType.FLOOD,
        description: str | None = FLOOD_DESCRIPTION,
        latitude: float | None = 28.6,
        longitude: float | None = 77.2,
        created_at: datetime | None = NOW,
        age: timedelta | None = None,
    ) -> HazardReport:
        if age is not None:
            created_at = NOW - age
        return HazardReport(
            id=report_id,
            submitter_id=submitter_id,
            type=hazard_type,
            description=description,
            severity=Severity.HIGH,
            location=Location(latitude=latitude, longitude=longitude, address="New Delhi"),
            created_at=created_at,
        )

    return _make
