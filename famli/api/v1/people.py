"""People directory: members across all households."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from famli.api.v1.auth import get_current_user
from famli.core.database import get_db
from famli.schemas.auth import CurrentUser
from famli.schemas.common import Pagination
from famli.schemas.households import MemberOut, PeopleListResponse, PersonItem
from famli.services.people import search_people

router = APIRouter()


@router.get("", response_model=PeopleListResponse)
def list_people(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    search: str = "",
    sort_by: Annotated[str, Query(alias="sortBy")] = "first_name",
) -> PeopleListResponse:
    """
    Page through every member with their household's name, color, city and state.
    sortBy accepts first_name or last_name; anything else sorts by first_name.
    """
    rows, total = search_people(db, page=page, limit=limit, search=search, sort_by=sort_by)
    people = [
        PersonItem(
            **MemberOut.model_validate(member).model_dump(),
            household_name=household.name,
            color_theme=household.color_theme,
            city=household.city,
            state=household.state,
        )
        for member, household in rows
    ]
    return PeopleListResponse(
        people=people,
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )
