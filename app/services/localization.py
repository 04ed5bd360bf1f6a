"""
Locale resolution for visitors.

Turns an Accept-Language header (or a stored NEXT_LOCALE preference) into
exactly one supported locale. Never fails: anything unrecognised resolves
to DEFAULT_LOCALE.
"""

from enum import Enum
from typing import NamedTuple, Optional

LOCALE_COOKIE = "NEXT_LOCALE"


class SupportedLocale(str, Enum):
    EN = "en"
    KO = "ko"
    JA = "ja"
    ZH_CN = "zh-CN"
    ZH_TW = "zh-TW"
    ES = "es"
    FR = "fr"
    DE = "de"
    PT = "pt"
    IT = "it"
    RU = "ru"
    AR = "ar"
    HI = "hi"
    NL = "nl"
    PL = "pl"
    TR = "tr"
    VI = "vi"
    TH = "th"
    ID = "id"
    SV = "sv"


DEFAULT_LOCALE = SupportedLocale.EN

# Header tags are matched case-insensitively
_BY_LOWER_TAG: dict[str, SupportedLocale] = {
    locale.value.lower(): locale for locale in SupportedLocale
}


class LanguagePreference(NamedTuple):
    tag: str
    weight: float


def parse_locale(value: Optional[str]) -> Optional[SupportedLocale]:
    """Return the supported locale spelled exactly as ``value``, else None."""
    if not value:
        return None
    try:
        return SupportedLocale(value)
    except ValueError:
        return None


def parse_accept_language(header: Optional[str]) -> list[LanguagePreference]:
    """Split an Accept-Language header into preferences, highest weight first.

    Malformed weights count as 1.0. Ties keep header order.
    """
    if not header:
        return []

    preferences = []
    for part in header.split(","):
        tag, *params = part.strip().split(";")
        tag = tag.strip().lower()
        if not tag or tag == "*":
            continue

        weight = 1.0
        for param in params:
            name, _, raw = param.strip().partition("=")
            if name.strip().lower() != "q":
                continue
            try:
                weight = float(raw.strip())
            except ValueError:
                weight = 1.0
            if weight != weight:  # NaN
                weight = 1.0

        preferences.append(LanguagePreference(tag, weight))

    # sorted() is stable, so equal weights stay in header order
    return sorted(preferences, key=lambda pref: -pref.weight)


def _match_tag(tag: str) -> Optional[SupportedLocale]:
    exact = _BY_LOWER_TAG.get(tag)
    if exact:
        return exact

    if tag.startswith("zh-hans") or tag == "zh-cn":
        return SupportedLocale.ZH_CN
    if tag.startswith("zh-hant") or tag in ("zh-tw", "zh-hk"):
        return SupportedLocale.ZH_TW

    base = tag.split("-")[0]
    return _BY_LOWER_TAG.get(base)


def resolve_locale(
    accept_language: Optional[str] = None,
    stored_locale: Optional[str] = None,
) -> SupportedLocale:
    """Pick the visitor's locale.

    A stored preference that names a supported locale wins over the header.
    Otherwise the header is walked in weight order and the first tag that
    matches (exactly, through Chinese script/region folding, or by its base
    language) is used.
    """
    stored = parse_locale(stored_locale)
    if stored:
        return stored

    for preference in parse_accept_language(accept_language):
        matched = _match_tag(preference.tag)
        if matched:
            return matched

    return DEFAULT_LOCALE
