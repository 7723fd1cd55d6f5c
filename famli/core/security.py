"""Password hashing and JWT access/refresh token issuing and verification."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from famli.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class InvalidTokenError(Exception):
    """Raised when a token has a bad signature, has expired, or carries malformed claims."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class TokenClaims:
    """Identity embedded in a verified access token."""

    id: int
    username: str
    role: str


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _encode(payload: dict[str, Any], secret: str) -> str:
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def issue_tokens(user_id: int, username: str, role: str, now: datetime | None = None) -> TokenPair:
    """
    Mint an access/refresh token pair for an identity.

    The access token carries sub, username and role and expires after
    ACCESS_TOKEN_EXPIRE_MINUTES; the refresh token carries only sub and expires
    after REFRESH_TOKEN_EXPIRE_DAYS. Each token gets its own jti, so two pairs
    issued in the same second never collide.
    """
    now = now or datetime.now(UTC)
    access_payload: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    refresh_payload: dict[str, Any] = {
        "sub": str(user_id),
        "type": REFRESH_TOKEN_TYPE,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    }
    return TokenPair(
        access_token=_encode(access_payload, settings.JWT_SECRET.get_secret_value()),
        refresh_token=_encode(refresh_payload, settings.JWT_REFRESH_SECRET.get_secret_value()),
    )


def _decode(token: str, secret: str, expected_type: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        raise InvalidTokenError() from e
    if payload.get("type") != expected_type:
        raise InvalidTokenError()
    return payload


def _user_id(payload: dict[str, Any]) -> int:
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidTokenError("Invalid token payload") from e


def verify_access_token(token: str) -> TokenClaims:
    """
    Verify an access token's signature and expiry and return its claims.
    Stateless: no database lookup. Raises InvalidTokenError.
    """
    payload = _decode(token, settings.JWT_SECRET.get_secret_value(), ACCESS_TOKEN_TYPE)
    username = payload.get("username")
    role = payload.get("role")
    if not isinstance(username, str) or not isinstance(role, str):
        raise InvalidTokenError("Invalid token payload")
    return TokenClaims(id=_user_id(payload), username=username, role=role)


def decode_refresh_token(token: str) -> int:
    """Verify a refresh token's signature and expiry; return the user id it was issued to."""
    payload = _decode(token, settings.JWT_REFRESH_SECRET.get_secret_value(), REFRESH_TOKEN_TYPE)
    return _user_id(payload)
