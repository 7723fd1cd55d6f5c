"""Credential store: user lookup, creation, updates and the first-run check."""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from famli.models import User

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    """Raised when a username or email is already taken."""

    def __init__(self, message: str = "Username or email already exists") -> None:
        self.message = message
        super().__init__(message)


def find_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def find_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def count_users(db: Session) -> int:
    """Number of registered users; zero means the setup flow is open."""
    return db.query(func.count(User.id)).scalar() or 0


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.username.asc()).all()


def insert_user(db: Session, username: str, email: str, password_hash: str, role: str) -> User:
    """Insert a user with an already-hashed password. Uniqueness is enforced by the store."""
    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUserError() from e
    db.refresh(user)
    logger.info("Created user id=%s username=%s role=%s", user.id, user.username, user.role)
    return user


def update_user(
    db: Session,
    user: User,
    *,
    username: str | None = None,
    email: str | None = None,
    role: str | None = None,
    password_hash: str | None = None,
) -> User:
    """Apply a partial update; only non-empty fields are written."""
    if username:
        user.username = username
    if email:
        user.email = email
    if role:
        user.role = role
    if password_hash:
        user.password_hash = password_hash
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUserError() from e
    db.refresh(user)
    logger.info("Updated user id=%s", user.id)
    return user


def update_preferences(db: Session, user: User, preferences: dict[str, Any] | None) -> User:
    user.preferences = preferences
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    """Delete a user; sessions cascade, audit entries keep a NULL user_id."""
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info("Deleted user id=%s", user_id)
