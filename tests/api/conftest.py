from __future__ import annotations

from typing import Dict

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hazard_watch.api.auth import router as auth_router
from hazard_watch.api.hazards import router as hazards_router
from hazard_watch.api.weather import router as weather_router
from hazard_watch.audit import AuditLogger
from hazard_watch.auth.security import TokenService
from hazard_watch.db.models import Location
from hazard_watch.db.store import InMemoryUserStore, InMemoryWeatherAlertStore
from hazard_watch.services import HazardReportService, UserService
from hazard_watch.verification import HazardVerificationEngine, RuleChainStrategy


@pytest.fixture()
def user_service(clock) -> UserService:
    return UserService(store=InMemoryUserStore(), tokens=TokenService(secret="api-test-secret"), clock=clock)


@pytest.fixture()
def hazard_service(hazard_store, clock) -> HazardReportService:
    engine = HazardVerificationEngine(RuleChainStrategy(), clock=clock)
    return HazardReportService(store=hazard_store, engine=engine, clock=clock, audit_logger=AuditLogger())


@pytest.fixture()
def alert_store() -> InMemoryWeatherAlertStore:
    return InMemoryWeatherAlertStore()


@pytest.fixture()
def app(clock, user_service, hazard_service, alert_store) -> FastAPI:
    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(hazards_router)
    app.include_router(weather_router)
    app.state.clock = clock
    app.state.user_service = user_service
    app.state.hazard_service = hazard_service
    app.state.weather_alert_store = alert_store
    app.state.weather_client = None
    return app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def _bearer(session) -> Dict[str, str]:
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture()
def citizen_headers(user_service: UserService) -> Dict[str, str]:
    session = user_service.register(
        name="Ravi",
        email="ravi@example.com",
        password="monsoon1",
        phone="+919812345678",
        location=Location(latitude=28.6, longitude=77.2, address="New Delhi"),
    )
    return _bearer(session)


@pytest.fixture()
def admin_headers(user_service: UserService) -> Dict[str, str]:
    session = user_service.register(
        name="Admin",
        email="ops@example.com",
        password="control1",
        phone="+919876543210",
        location=Location(latitude=28.6, longitude=77.2, address="New Delhi"),
        is_admin=True,
    )
    return _bearer(session)
