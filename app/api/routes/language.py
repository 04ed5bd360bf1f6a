from fastapi import APIRouter, Depends, HTTPException, Response

from app.api.deps import preferred_locale
from app.domain.schemas import LocaleUpdate
from app.services.localization import LOCALE_COOKIE, SupportedLocale, parse_locale

router = APIRouter()

LOCALE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


@router.get("")
def get_locale(locale: SupportedLocale = Depends(preferred_locale)):
    """Current locale and the list the language switcher offers."""
    return {
        "locale": locale.value,
        "supported": [supported.value for supported in SupportedLocale],
    }


@router.post("")
def set_locale(update: LocaleUpdate, response: Response):
    """Remember the visitor's language choice in the NEXT_LOCALE cookie."""
    locale = parse_locale(update.locale)
    if not locale:
        raise HTTPException(status_code=400, detail=f"Unsupported locale: {update.locale}")

    response.set_cookie(
        LOCALE_COOKIE,
        locale.value,
        max_age=LOCALE_COOKIE_MAX_AGE,
        path="/",
        samesite="lax",
    )
    return {"locale": locale.value}
