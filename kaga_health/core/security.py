# kaga_health/core/security.py
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from kaga_health.core.config import settings

# =========
# Passwords
# =========

_pwd_ctx = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    default="bcrypt_sha256",
    deprecated="auto",
)


def hash_password(plain_password: str) -> str:
    if not isinstance(plain_password, str) or plain_password == "":
        raise ValueError("Password must be a non-empty string")
    return _pwd_ctx.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """
    Check a plain-text password against a stored hash.
    Malformed or unknown hashes count as a mismatch.
    """
    if not password_hash or not plain_password:
        return False
    try:
        return _pwd_ctx.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        return False


# =====
# JWTs
# =====

class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _encode(claims: Dict[str, Any], expires_at: datetime) -> str:
    to_encode = {
        **claims,
        "iat": int(_utcnow().timestamp()),
        "exp": int(expires_at.timestamp()),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=ALGORITHM)


def create_access_token(
    *,
    subject: str,                # user id (UUID as str)
    email: Optional[str] = None,
    role: Optional[str] = None,  # "patient" | "doctor" | "admin"
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Create a short-lived Bearer access token.
    """
    claims: Dict[str, Any] = {"sub": subject, "type": TokenType.ACCESS.value}
    if email:
        claims["email"] = email
    if role:
        claims["role"] = role
    minutes = expires_minutes or settings.ACCESS_EXPIRES_MIN
    return _encode(claims, _utcnow() + timedelta(minutes=minutes))


def create_refresh_token(*, subject: str, expires_days: Optional[int] = None) -> str:
    days = expires_days or settings.REFRESH_EXPIRES_DAYS
    return _encode(
        {"sub": subject, "type": TokenType.REFRESH.value},
        _utcnow() + timedelta(days=days),
    )


class InvalidTokenError(Exception):
    """Raised when a token is missing/invalid/expired or claims are malformed."""


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises InvalidTokenError on failure.
    """
    if not token:
        raise InvalidTokenError("missing_token")
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise InvalidTokenError("invalid_token") from exc

    if "sub" not in payload or "type" not in payload:
        raise InvalidTokenError("invalid_claims")

    return payload


def is_access_token(payload: Dict[str, Any]) -> bool:
    return payload.get("type") == TokenType.ACCESS.value


def is_refresh_token(payload: Dict[str, Any]) -> bool:
    return payload.get("type") == TokenType.REFRESH.value
