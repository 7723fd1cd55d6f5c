"""Households and their members: listing and search for any signed-in user, mutations by role."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from famli.api.v1.auth import get_current_user, require
from famli.core.database import get_db
from famli.core.errors import NotFound, ValidationError
from famli.schemas.auth import CurrentUser, MessageResponse
from famli.schemas.common import Pagination
from famli.schemas.households import (
    HouseholdDetail,
    HouseholdIn,
    HouseholdListItem,
    HouseholdListResponse,
    HouseholdOut,
    MemberIn,
    MemberOut,
)
from famli.services import audit
from famli.services import households as household_store

router = APIRouter()


def _require_name(body: HouseholdIn) -> None:
    if not body.name or not body.name.strip():
        raise ValidationError("Household name is required")


def _require_first_name(body: MemberIn) -> None:
    if not body.first_name or not body.first_name.strip():
        raise ValidationError("First name is required")


def _get_household_or_404(db: Session, household_id: int):
    household = household_store.get_household(db, household_id)
    if household is None:
        raise NotFound("Household not found")
    return household


@router.get("", response_model=HouseholdListResponse)
def list_households(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=200)] = 20,
    search: str = "",
) -> HouseholdListResponse:
    """
    Page through households ordered by name.

    search matches name, city or postal code (substring). Each row carries
    member_count.
    """
    rows, total = household_store.search_households(db, page=page, limit=limit, search=search)
    items = []
    for household, member_count in rows:
        item = HouseholdListItem.model_validate(household)
        item.member_count = member_count
        items.append(item)
    return HouseholdListResponse(
        households=items,
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{household_id}", response_model=HouseholdDetail)
def get_household(
    household_id: int,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> HouseholdDetail:
    """A household with its members ordered by first name."""
    household = _get_household_or_404(db, household_id)
    detail = HouseholdDetail.model_validate(household)
    detail.members = [
        MemberOut.model_validate(m) for m in household_store.list_members(db, household_id)
    ]
    return detail


@router.post("", response_model=HouseholdOut, status_code=status.HTTP_201_CREATED)
def create_household(
    body: HouseholdIn,
    user: Annotated[CurrentUser, Depends(require("households:create"))],
    db: Annotated[Session, Depends(get_db)],
) -> HouseholdOut:
    _require_name(body)
    household = household_store.create_household(db, body.model_dump())
    audit.record(db, user.id, "CREATE", "household", household.id, {"name": household.name})
    return HouseholdOut.model_validate(household)


@router.put("/{household_id}", response_model=HouseholdOut)
def update_household(
    household_id: int,
    body: HouseholdIn,
    user: Annotated[CurrentUser, Depends(require("households:update"))],
    db: Annotated[Session, Depends(get_db)],
) -> HouseholdOut:
    """Replace all editable fields of a household."""
    _require_name(body)
    household = _get_household_or_404(db, household_id)
    household = household_store.update_household(db, household, body.model_dump())
    audit.record(db, user.id, "UPDATE", "household", household.id, {"name": household.name})
    return HouseholdOut.model_validate(household)


@router.delete("/{household_id}", response_model=MessageResponse)
def delete_household(
    household_id: int,
    user: Annotated[CurrentUser, Depends(require("households:delete"))],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete a household and, by cascade, its members (admin only)."""
    household = _get_household_or_404(db, household_id)
    name = household.name
    household_store.delete_household(db, household)
    audit.record(db, user.id, "DELETE", "household", household_id, {"name": name})
    return MessageResponse(message="Household deleted successfully")


@router.get("/{household_id}/members", response_model=list[MemberOut])
def list_members(
    household_id: int,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[MemberOut]:
    return [MemberOut.model_validate(m) for m in household_store.list_members(db, household_id)]


@router.post(
    "/{household_id}/members",
    response_model=MemberOut,
    status_code=status.HTTP_201_CREATED,
)
def create_member(
    household_id: int,
    body: MemberIn,
    user: Annotated[CurrentUser, Depends(require("members:create"))],
    db: Annotated[Session, Depends(get_db)],
) -> MemberOut:
    _require_first_name(body)
    household = _get_household_or_404(db, household_id)
    member = household_store.create_member(db, household, body.model_dump())
    audit.record(
        db,
        user.id,
        "CREATE",
        "household_member",
        member.id,
        {"household_id": household_id, "first_name": member.first_name, "last_name": member.last_name},
    )
    return MemberOut.model_validate(member)


@router.put("/{household_id}/members/{member_id}", response_model=MemberOut)
def update_member(
    household_id: int,
    member_id: int,
    body: MemberIn,
    user: Annotated[CurrentUser, Depends(require("members:update"))],
    db: Annotated[Session, Depends(get_db)],
) -> MemberOut:
    _require_first_name(body)
    member = household_store.get_member(db, household_id, member_id)
    if member is None:
        raise NotFound("Member not found")
    member = household_store.update_member(db, member, body.model_dump())
    audit.record(
        db,
        user.id,
        "UPDATE",
        "household_member",
        member.id,
        {"first_name": member.first_name, "last_name": member.last_name},
    )
    return MemberOut.model_validate(member)


@router.delete("/{household_id}/members/{member_id}", response_model=MessageResponse)
def delete_member(
    household_id: int,
    member_id: int,
    user: Annotated[CurrentUser, Depends(require("members:delete"))],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    member = household_store.get_member(db, household_id, member_id)
    if member is None:
        raise NotFound("Member not found")
    details = {"first_name": member.first_name, "last_name": member.last_name}
    household_store.delete_member(db, member)
    audit.record(db, user.id, "DELETE", "household_member", member_id, details)
    return MessageResponse(message="Member deleted successfully")
