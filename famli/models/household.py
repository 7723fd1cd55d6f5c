"""ORM models for households and the people who belong to them."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from famli.models.base import Base, TimestampMixin

DEFAULT_COLOR_THEME = "#3b82f6"


class Household(TimestampMixin, Base):
    """A postal address with a display color and free-form notes."""

    __tablename__ = "households"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    postal_code = Column(String(32), nullable=True)
    country = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    color_theme = Column(
        String(32),
        nullable=True,
        default=DEFAULT_COLOR_THEME,
        server_default=DEFAULT_COLOR_THEME,
    )

    members = relationship(
        "HouseholdMember",
        back_populates="household",
        cascade="all, delete-orphan",
        order_by="HouseholdMember.first_name",
    )


class HouseholdMember(TimestampMixin, Base):
    """A person with contact details, owned by exactly one household."""

    __tablename__ = "household_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    household_id = Column(
        Integer,
        ForeignKey("households.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=True)
    role = Column(String(64), nullable=True)
    birthday = Column(Date, nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)

    household = relationship("Household", back_populates="members")
