#!/usr/bin/env python3
# Copyright 2025 msq
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from hazard_watch.api import auth as auth_api
from hazard_watch.api import hazards as hazards_api
from hazard_watch.api import weather as weather_api
from hazard_watch.audit import AuditLogger
from hazard_watch.auth.security import TokenService
from hazard_watch.clock import Clock, SystemClock
from hazard_watch.config import AppConfig
from hazard_watch.db.seed import seed_sample_data
from hazard_watch.db.store import (
    InMemoryHazardStore,
    InMemoryUserStore,
    InMemoryWeatherAlertStore,
)
from hazard_watch.external import OpenWeatherClient
from hazard_watch.logging import clear_trace_id, configure_logging, set_trace_id
from hazard_watch.services import HazardReportService, UserService
from hazard_watch.verification import HazardVerificationEngine, build_strategy

logger = structlog.get_logger(__name__)


class TraceIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a trace-id to every request's log context.

    1. reuse the client's X-Trace-Id header when present
    2. otherwise generate a UUID
    3. echo it back in the X-Trace-Id response header
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get("X-Trace-Id") or str(uuid.uuid4())
        set_trace_id(trace_id)
        try:
            response = await call_next(request)
            response.headers["X-Trace-Id"] = trace_id
            return response
        finally:
            clear_trace_id()


def create_app(config: AppConfig | None = None, *, clock: Clock | None = None) -> FastAPI:
    cfg = config or AppConfig.load_from_env()
    clock = clock or SystemClock()

    app = FastAPI(title="Hazard Watch API")
    app.add_middleware(TraceIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    Instrumentator().instrument(app).expose(app)

    hazard_store = InMemoryHazardStore()
    user_store = InMemoryUserStore()
    alert_store = InMemoryWeatherAlertStore()
    if cfg.seed_sample_data:
        seed_sample_data(hazards=hazard_store, users=user_store, alerts=alert_store, clock=clock)

    engine = HazardVerificationEngine(build_strategy(cfg.verification), clock=clock)
    tokens = TokenService(
        secret=cfg.jwt_secret,
        algorithm=cfg.jwt_algorithm,
        expiration=timedelta(days=cfg.jwt_expiration_days),
    )

    app.state.config = cfg
    app.state.clock = clock
    app.state.hazard_service = HazardReportService(
        store=hazard_store,
        engine=engine,
        clock=clock,
        audit_logger=AuditLogger(),
    )
    app.state.user_service = UserService(store=user_store, tokens=tokens, clock=clock)
    app.state.weather_alert_store = alert_store
    app.state.weather_client = (
        OpenWeatherClient(
            api_key=cfg.openweather_api_key,
            base_url=cfg.openweather_base_url,
            timeout=cfg.weather_timeout_seconds,
        )
        if cfg.openweather_api_key
        else None
    )

    app.include_router(auth_api.router)
    app.include_router(hazards_api.router)
    app.include_router(weather_api.router)

    @app.on_event("startup")
    async def startup_event() -> None:
        configure_logging(json_logs=cfg.log_json, log_level=cfg.log_level)
        logger.info(
            "service_started",
            app_env=cfg.app_env,
            verification_strategy=engine.strategy_name,
            weather_proxy_enabled=app.state.weather_client is not None,
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        client = app.state.weather_client
        if client is not None:
            await client.close()
            app.state.weather_client = None
        logger.info("service_stopped")

    @app.get("/healthz")
    async def healthz():
        """Liveness probe."""
        logger.debug("healthz_probe")
        return {"status": "ok"}

    @app.get("/api/health")
    async def api_health():
        return {
            "status": "OK",
            "message": "Hazard Watch API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": cfg.app_env,
        }

    return app


app = create_app()
