"""Append-only audit trail of user, household and member mutations."""

import logging
from typing import Any, Literal

from sqlalchemy.orm import Session

from famli.models import AuditEntry, User

logger = logging.getLogger(__name__)

AuditAction = Literal["CREATE", "UPDATE", "DELETE"]


def record(
    db: Session,
    user_id: int | None,
    action: AuditAction,
    entity_type: str,
    entity_id: int | None,
    details: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Append one audit entry and commit it.

    Written as its own statement after the mutation it describes; the two are
    not atomic, so the trail is advisory.
    """
    entry = AuditEntry(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    db.add(entry)
    db.commit()
    logger.debug(
        "Audit: user_id=%s action=%s entity=%s:%s", user_id, action, entity_type, entity_id
    )
    return entry


def list_entries(db: Session, page: int, limit: int) -> tuple[list[tuple[AuditEntry, str | None]], int]:
    """Return one page of entries (newest first) joined with the acting username, plus the total count."""
    total = db.query(AuditEntry).count()
    rows = (
        db.query(AuditEntry, User.username)
        .outerjoin(User, AuditEntry.user_id == User.id)
        .order_by(AuditEntry.created_at.desc(), AuditEntry.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )
    return [(entry, username) for entry, username in rows], total
