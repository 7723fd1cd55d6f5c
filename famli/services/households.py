"""Household and member persistence: search, pagination, CRUD."""

import logging
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from famli.models import Household, HouseholdMember
from famli.models.household import DEFAULT_COLOR_THEME

logger = logging.getLogger(__name__)

HOUSEHOLD_FIELDS = (
    "name",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
    "country",
    "notes",
    "color_theme",
)

MEMBER_FIELDS = (
    "first_name",
    "last_name",
    "role",
    "birthday",
    "email",
    "phone",
    "notes",
)


def search_households(
    db: Session, page: int, limit: int, search: str = ""
) -> tuple[list[tuple[Household, int]], int]:
    """
    Return one page of households ordered by name, each with its member count,
    plus the total number matching search (name, city or postal code).
    """
    query = db.query(Household)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Household.name.like(pattern),
                Household.city.like(pattern),
                Household.postal_code.like(pattern),
            )
        )
    total = query.count()
    households = (
        query.order_by(Household.name.asc(), Household.id.asc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )
    counts: dict[int, int] = {}
    ids = [h.id for h in households]
    if ids:
        counts = dict(
            db.query(HouseholdMember.household_id, func.count(HouseholdMember.id))
            .filter(HouseholdMember.household_id.in_(ids))
            .group_by(HouseholdMember.household_id)
            .all()
        )
    return [(h, counts.get(h.id, 0)) for h in households], total


def get_household(db: Session, household_id: int) -> Household | None:
    return db.get(Household, household_id)


def create_household(db: Session, data: dict[str, Any]) -> Household:
    values = {key: data.get(key) for key in HOUSEHOLD_FIELDS}
    values["color_theme"] = values["color_theme"] or DEFAULT_COLOR_THEME
    household = Household(**values)
    db.add(household)
    db.commit()
    db.refresh(household)
    logger.info("Created household id=%s", household.id)
    return household


def update_household(db: Session, household: Household, data: dict[str, Any]) -> Household:
    """Replace every editable field (a PUT, not a patch)."""
    for key in HOUSEHOLD_FIELDS:
        setattr(household, key, data.get(key))
    if not household.color_theme:
        household.color_theme = DEFAULT_COLOR_THEME
    db.commit()
    db.refresh(household)
    logger.info("Updated household id=%s", household.id)
    return household


def delete_household(db: Session, household: Household) -> None:
    household_id = household.id
    db.delete(household)
    db.commit()
    logger.info("Deleted household id=%s", household_id)


def list_members(db: Session, household_id: int) -> list[HouseholdMember]:
    return (
        db.query(HouseholdMember)
        .filter(HouseholdMember.household_id == household_id)
        .order_by(HouseholdMember.first_name.asc(), HouseholdMember.id.asc())
        .all()
    )


def get_member(db: Session, household_id: int, member_id: int) -> HouseholdMember | None:
    return (
        db.query(HouseholdMember)
        .filter(
            HouseholdMember.id == member_id,
            HouseholdMember.household_id == household_id,
        )
        .first()
    )


def create_member(db: Session, household: Household, data: dict[str, Any]) -> HouseholdMember:
    member = HouseholdMember(
        household_id=household.id,
        **{key: data.get(key) for key in MEMBER_FIELDS},
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("Added member id=%s to household id=%s", member.id, household.id)
    return member


def update_member(db: Session, member: HouseholdMember, data: dict[str, Any]) -> HouseholdMember:
    for key in MEMBER_FIELDS:
        setattr(member, key, data.get(key))
    db.commit()
    db.refresh(member)
    logger.info("Updated member id=%s", member.id)
    return member


def delete_member(db: Session, member: HouseholdMember) -> None:
    member_id = member.id
    db.delete(member)
    db.commit()
    logger.info("Deleted member id=%s", member_id)
