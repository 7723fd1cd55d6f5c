"""Directory of people across all households."""

from sqlalchemy import or_
from sqlalchemy.orm import Session

from famli.models import Household, HouseholdMember

SORTABLE_FIELDS = frozenset({"first_name", "last_name"})


def search_people(
    db: Session,
    page: int,
    limit: int,
    search: str = "",
    sort_by: str = "first_name",
) -> tuple[list[tuple[HouseholdMember, Household]], int]:
    """
    Page through members joined with their household. Unknown sort fields fall
    back to first_name; last_name is always the secondary key.
    """
    sort_field = sort_by if sort_by in SORTABLE_FIELDS else "first_name"
    query = db.query(HouseholdMember, Household).join(
        Household, HouseholdMember.household_id == Household.id
    )
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                HouseholdMember.first_name.like(pattern),
                HouseholdMember.last_name.like(pattern),
                Household.name.like(pattern),
            )
        )
    total = query.count()
    rows = (
        query.order_by(
            getattr(HouseholdMember, sort_field).asc(),
            HouseholdMember.last_name.asc(),
            HouseholdMember.id.asc(),
        )
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )
    return [(member, household) for member, household in rows], total
