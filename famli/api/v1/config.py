"""Locale configuration for address forms. Public; no authentication."""

from fastapi import APIRouter

from famli.core.errors import NotFound
from famli.schemas.config import LocaleResponse, LocalesResponse
from famli.services.locales import DEFAULT_LOCALE, SUPPORTED_LOCALES, get_locale_config

router = APIRouter()


def _locale(code: str, config: dict) -> LocaleResponse:
    return LocaleResponse(code=code, name=config["name"], address_fields=config["addressFields"])


@router.get("/locales", response_model=LocalesResponse)
def list_locales() -> LocalesResponse:
    """Supported locale codes, the default, and the address labels for each."""
    return LocalesResponse(
        supported=list(SUPPORTED_LOCALES),
        default=DEFAULT_LOCALE,
        locales=[_locale(code, get_locale_config(code)) for code in SUPPORTED_LOCALES],
    )


@router.get("/locales/{code}", response_model=LocaleResponse)
def get_locale(code: str) -> LocaleResponse:
    config = get_locale_config(code)
    if config is None:
        raise NotFound("Locale not found")
    return _locale(code, config)
