"""Country-specific address field labels."""

DEFAULT_LOCALE = "en-US"

LOCALE_CONFIG: dict[str, dict] = {
    "en-US": {
        "name": "United States",
        "addressFields": {
            "line1": "Address Line 1",
            "line2": "Address Line 2",
            "city": "City",
            "state": "State",
            "postalCode": "ZIP Code",
            "country": "Country",
        },
    },
    "en-GB": {
        "name": "United Kingdom",
        "addressFields": {
            "line1": "Address Line 1",
            "line2": "Address Line 2",
            "city": "Town",
            "state": "County",
            "postalCode": "Postcode",
            "country": "Country",
        },
    },
    "en-CA": {
        "name": "Canada",
        "addressFields": {
            "line1": "Address Line 1",
            "line2": "Address Line 2",
            "city": "City",
            "state": "Province",
            "postalCode": "Postal Code",
            "country": "Country",
        },
    },
    "en-AU": {
        "name": "Australia",
        "addressFields": {
            "line1": "Address Line 1",
            "line2": "Address Line 2",
            "city": "City",
            "state": "State",
            "postalCode": "Postcode",
            "country": "Country",
        },
    },
}

SUPPORTED_LOCALES: tuple[str, ...] = tuple(LOCALE_CONFIG)


def get_locale_config(code: str) -> dict | None:
    """Return the labels for code, or None if the locale is not supported."""
    return LOCALE_CONFIG.get(code)


def is_valid_locale(code: str) -> bool:
    return code in LOCALE_CONFIG
