"""Session manager: persist, rotate and revoke refresh-token sessions."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session

from famli.core.config import settings
from famli.core.security import (
    InvalidTokenError,
    TokenPair,
    decode_refresh_token,
    issue_tokens,
)
from famli.models import User, UserSession

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when no live session row matches a refresh token."""

    def __init__(self, message: str = "Invalid refresh token") -> None:
        self.message = message
        super().__init__(message)


class UserNotFoundError(Exception):
    """Raised when a session's owner no longer exists."""

    def __init__(self, message: str = "User not found") -> None:
        self.message = message
        super().__init__(message)


def create_session(db: Session, user: User, now: datetime | None = None) -> TokenPair:
    """Issue a token pair for user and store it as a new session row."""
    now = now or datetime.now(UTC)
    tokens = issue_tokens(user.id, user.username, user.role, now=now)
    session_row = UserSession(
        user_id=user.id,
        token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_at=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )
    db.add(session_row)
    db.commit()
    logger.info("Session created: session_id=%s user_id=%s", session_row.id, user.id)
    return tokens


def refresh_session(db: Session, refresh_token: str, now: datetime | None = None) -> TokenPair:
    """
    Exchange a refresh token for a new pair, rotating the session row in place.

    The row keeps its identity and expires_at; only token and refresh_token change.
    The rotation only applies if the row still holds the presented refresh token,
    so of two concurrent refreshes with the same token exactly one succeeds.

    Raises InvalidTokenError, SessionNotFoundError or UserNotFoundError.
    """
    now = now or datetime.now(UTC)
    decode_refresh_token(refresh_token)

    session_row = (
        db.query(UserSession)
        .filter(
            UserSession.refresh_token == refresh_token,
            UserSession.expires_at > now,
        )
        .first()
    )
    if session_row is None:
        raise SessionNotFoundError()

    user = db.get(User, session_row.user_id)
    if user is None:
        raise UserNotFoundError()

    session_id = session_row.id
    tokens = issue_tokens(user.id, user.username, user.role, now=now)
    result = db.execute(
        update(UserSession)
        .where(
            UserSession.id == session_id,
            UserSession.refresh_token == refresh_token,
        )
        .values(token=tokens.access_token, refresh_token=tokens.refresh_token)
        .execution_options(synchronize_session=False)
    )
    rotated = result.rowcount
    db.commit()
    if rotated == 0:
        logger.warning("Refresh lost rotation race: session_id=%s", session_id)
        raise SessionNotFoundError()
    logger.info("Session rotated: session_id=%s user_id=%s", session_id, user.id)
    return tokens


def revoke_session(db: Session, refresh_token: str) -> bool:
    """Delete the session holding refresh_token. Idempotent; returns whether a row was removed."""
    deleted = (
        db.query(UserSession)
        .filter(UserSession.refresh_token == refresh_token)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.info("Session revoked")
    return deleted > 0


def prune_expired_sessions(db: Session, now: datetime | None = None) -> int:
    """Delete sessions whose refresh window has closed. Safe to run repeatedly."""
    now = now or datetime.now(UTC)
    deleted = (
        db.query(UserSession)
        .filter(UserSession.expires_at <= now)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted > 0:
        logger.info("Pruned expired sessions: cutoff=%s, deleted=%s", now.isoformat(), deleted)
    return deleted


__all__ = [
    "InvalidTokenError",
    "SessionNotFoundError",
    "UserNotFoundError",
    "create_session",
    "prune_expired_sessions",
    "refresh_session",
    "revoke_session",
]
