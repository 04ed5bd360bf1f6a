"""
Phone number validation and normalization.

The visitor's locale decides which calling region is assumed for numbers
typed without an international prefix. Accepted numbers are stored in E.164
form (``+821012345678``). Raw values are never logged.
"""

import logging

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat, PhoneNumberType

from app.core.errors import PhoneInvalid
from app.services.localization import SupportedLocale

logger = logging.getLogger(__name__)

DEFAULT_REGION = "US"
FALLBACK_PLACEHOLDER = "+1 234 567 8900"

LOCALE_TO_REGION: dict[SupportedLocale, str] = {
    SupportedLocale.EN: "US",
    SupportedLocale.KO: "KR",
    SupportedLocale.JA: "JP",
    SupportedLocale.ZH_CN: "CN",
    SupportedLocale.ZH_TW: "TW",
    SupportedLocale.ES: "ES",
    SupportedLocale.FR: "FR",
    SupportedLocale.DE: "DE",
    SupportedLocale.PT: "BR",
    SupportedLocale.IT: "IT",
    SupportedLocale.RU: "RU",
    SupportedLocale.AR: "SA",
    SupportedLocale.HI: "IN",
    SupportedLocale.NL: "NL",
    SupportedLocale.PL: "PL",
    SupportedLocale.TR: "TR",
    SupportedLocale.VI: "VN",
    SupportedLocale.TH: "TH",
    SupportedLocale.ID: "ID",
    SupportedLocale.SV: "SE",
}


def region_for_locale(locale: SupportedLocale | str | None) -> str:
    """Default calling region for a locale; DEFAULT_REGION when unknown."""
    try:
        return LOCALE_TO_REGION.get(SupportedLocale(locale), DEFAULT_REGION)
    except ValueError:
        return DEFAULT_REGION


def _parse(raw: str, region: str) -> phonenumbers.PhoneNumber | None:
    if not raw or not raw.strip():
        return None
    try:
        return phonenumbers.parse(raw, region)
    except NumberParseException:
        logger.debug(f"Could not parse phone input (length={len(raw)})")
        return None


def normalize_phone(raw: str, locale: SupportedLocale | str | None) -> str:
    """Validate ``raw`` and return it in E.164 form.

    Numbers with an international prefix ignore the locale's region hint.

    Raises:
        PhoneInvalid: The input is empty, unparseable, or not a valid
            number for its region.
    """
    region = region_for_locale(locale)
    parsed = _parse(raw, region)
    if parsed is None or not phonenumbers.is_valid_number(parsed):
        raise PhoneInvalid(f"Invalid phone number for region {region}")

    return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)


def is_valid_phone(raw: str, locale: SupportedLocale | str | None) -> bool:
    try:
        normalize_phone(raw, locale)
    except PhoneInvalid:
        return False
    return True


def format_phone(raw: str, locale: SupportedLocale | str | None) -> str:
    """International display form, or the raw input if it cannot be parsed."""
    parsed = _parse(raw, region_for_locale(locale))
    if parsed is None:
        return raw
    return phonenumbers.format_number(parsed, PhoneNumberFormat.INTERNATIONAL)


def phone_placeholder(locale: SupportedLocale | str | None) -> str:
    """Example mobile number for the locale's region, for the form input."""
    example = phonenumbers.example_number_for_type(
        region_for_locale(locale), PhoneNumberType.MOBILE
    )
    if example is None:
        return FALLBACK_PLACEHOLDER
    return phonenumbers.format_number(example, PhoneNumberFormat.INTERNATIONAL)
