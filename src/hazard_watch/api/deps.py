# Copyright 2025 msq
"""Dependencies shared by the routers.

Services live on ``app.state`` and are attached by ``api.main`` at import time
(tests attach their own).
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hazard_watch.clock import Clock, SystemClock
from hazard_watch.db.models import UserRecord
from hazard_watch.db.store import InMemoryWeatherAlertStore
from hazard_watch.errors import InvalidTokenError
from hazard_watch.external import OpenWeatherClient
from hazard_watch.services import HazardReportService, UserService

logger = structlog.get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def _require_state(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} is not initialized")
    return service


def require_hazard_service(request: Request) -> HazardReportService:
    return _require_state(request, "hazard_service", "Hazard service")


def require_user_service(request: Request) -> UserService:
    return _require_state(request, "user_service", "User service")


def require_alert_store(request: Request) -> InMemoryWeatherAlertStore:
    return _require_state(request, "weather_alert_store", "Weather alert store")


def get_clock(request: Request) -> Clock:
    return getattr(request.app.state, "clock", None) or SystemClock()


def optional_weather_client(request: Request) -> Optional[OpenWeatherClient]:
    """``None`` when no API key is configured; routes answer 500 in that case."""
    return getattr(request.app.state, "weather_client", None)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    users: UserService = Depends(require_user_service),
) -> UserRecord:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = users.tokens.decode(credentials.credentials)
    except InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    user = users.get(str(payload["sub"]))
    if user is None:
        logger.warning("token_user_missing", user_id=payload.get("sub"))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not found")
    return user


def require_admin(user: UserRecord = Depends(get_current_user)) -> UserRecord:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
