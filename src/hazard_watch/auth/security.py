# Copyright 2025 msq
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
import structlog
from passlib.context import CryptContext

from hazard_watch.errors import InvalidTokenError

logger = structlog.get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        logger.warning("password_hash_unrecognized")
        return False


class TokenService:
    """Issues and checks HS256 bearer tokens carrying the user id and email."""

    def __init__(self, *, secret: str, algorithm: str = "HS256", expiration: timedelta = timedelta(days=7)) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._expiration = expiration

    def create_access_token(self, *, user_id: str, email: str) -> str:
        issued_at = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self._expiration,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            logger.warning("access_token_invalid", error=str(exc))
            raise InvalidTokenError("Invalid or expired token") from exc
        if not payload.get("sub"):
            raise InvalidTokenError("Invalid token payload")
        return payload
