"""ORM model for the append-only audit trail."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from famli.models.base import Base


class AuditEntry(Base):
    """
    One recorded mutation: who did what to which entity.

    user_id is set to NULL when the acting user is deleted; the entry itself is
    never updated or removed.
    """

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action = Column(String(16), nullable=False)
    entity_type = Column(String(64), nullable=False)
    entity_id = Column(Integer, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
