"""Pydantic schemas for locale configuration."""

from pydantic import BaseModel, ConfigDict, Field


class LocaleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    name: str
    address_fields: dict[str, str] = Field(..., alias="addressFields")


class LocalesResponse(BaseModel):
    supported: list[str]
    default: str
    locales: list[LocaleResponse]
