"""Pydantic schemas for households, members and the people directory."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from famli.schemas.common import Pagination


class HouseholdIn(BaseModel):
    """Household create/update body. name is required; checked in the handler for a clear message."""

    name: str | None = Field(default=None, max_length=255)
    address_line1: str | None = Field(default=None, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=255)
    state: str | None = Field(default=None, max_length=255)
    postal_code: str | None = Field(default=None, max_length=32)
    country: str | None = Field(default=None, max_length=255)
    notes: str | None = None
    color_theme: str | None = Field(
        default=None,
        pattern=r"^#[0-9a-fA-F]{6}$",
        description="Hex color, e.g. #3b82f6",
    )


class HouseholdOut(BaseModel):
    id: int
    name: str
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    notes: str | None = None
    color_theme: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class HouseholdListItem(HouseholdOut):
    member_count: int = 0


class HouseholdListResponse(BaseModel):
    households: list[HouseholdListItem]
    pagination: Pagination


class MemberIn(BaseModel):
    """Member create/update body. first_name is required; checked in the handler."""

    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    role: str | None = Field(default=None, max_length=64)
    birthday: date | None = None
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)
    notes: str | None = None


class MemberOut(BaseModel):
    id: int
    household_id: int
    first_name: str
    last_name: str | None = None
    role: str | None = None
    birthday: date | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class HouseholdDetail(HouseholdOut):
    members: list[MemberOut] = Field(default_factory=list)


class PersonItem(MemberOut):
    """Member row with its household's display fields."""

    household_name: str
    color_theme: str | None = None
    city: str | None = None
    state: str | None = None


class PeopleListResponse(BaseModel):
    people: list[PersonItem]
    pagination: Pagination
