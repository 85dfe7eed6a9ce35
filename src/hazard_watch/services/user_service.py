# Copyright 2025 msq
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from hazard_watch.auth.security import TokenService, hash_password, verify_password
from hazard_watch.clock import Clock, SystemClock
from hazard_watch.db.models import Location, UserRecord
from hazard_watch.db.store import InMemoryUserStore
from hazard_watch.errors import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    UserNotFoundError,
)

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class AuthSession:
    user: UserRecord
    token: str


class UserService:
    def __init__(
        self,
        *,
        store: InMemoryUserStore,
        tokens: TokenService,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._tokens = tokens
        self._clock = clock or SystemClock()

    @property
    def tokens(self) -> TokenService:
        return self._tokens

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: str,
        location: Location,
        is_admin: bool = False,
    ) -> AuthSession:
        if self._store.find_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)
        user = self._store.add(
            UserRecord(
                id="",
                email=email.strip().lower(),
                name=name,
                phone=phone,
                location=location,
                password_hash=hash_password(password),
                created_at=self._clock.now(),
                is_admin=is_admin,
            )
        )
        logger.info("user_registered", user_id=user.id, is_admin=is_admin)
        return AuthSession(user=user, token=self._issue(user))

    def authenticate(self, *, email: str, password: str) -> AuthSession:
        user = self._store.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("login_rejected")
            raise InvalidCredentialsError()
        logger.info("user_logged_in", user_id=user.id)
        return AuthSession(user=user, token=self._issue(user))

    def get(self, user_id: str) -> Optional[UserRecord]:
        return self._store.find_by_id(user_id)

    def update_profile(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> UserRecord:
        changes = {
            key: value
            for key, value in (("name", name), ("phone", phone), ("location", location))
            if value is not None
        }
        updated = self._store.update(user_id, **changes)
        if updated is None:
            raise UserNotFoundError(user_id)
        return updated

    def _issue(self, user: UserRecord) -> str:
        return self._tokens.create_access_token(user_id=user.id, email=user.email)
