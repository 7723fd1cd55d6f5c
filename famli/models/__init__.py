"""SQLAlchemy ORM models."""

from famli.models.audit import AuditEntry
from famli.models.base import Base
from famli.models.household import Household, HouseholdMember
from famli.models.user import User, UserSession

__all__ = ["AuditEntry", "Base", "Household", "HouseholdMember", "User", "UserSession"]
