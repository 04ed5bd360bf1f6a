import logging
from typing import Any

from fastapi import Depends, HTTPException, Request
from starlette.formparsers import MultiPartException

from app.core.config import Settings, get_settings
from app.domain.schemas import PassRequest, SetDefaultRequest
from app.services.localization import LOCALE_COOKIE, SupportedLocale, resolve_locale
from app.services.messages import Messages, get_messages
from app.services.pass_signer import OpenSSLPassSigner, PassSigner

logger = logging.getLogger(__name__)


def get_pass_signer(settings: Settings = Depends(get_settings)) -> PassSigner:
    return OpenSSLPassSigner(settings.openssl_bin)


def header_locale(request: Request) -> SupportedLocale:
    """Locale from Accept-Language only (API endpoints ignore the cookie)."""
    return resolve_locale(request.headers.get("accept-language"))


def preferred_locale(request: Request) -> SupportedLocale:
    """Locale from the NEXT_LOCALE cookie, falling back to Accept-Language."""
    return resolve_locale(
        request.headers.get("accept-language"),
        stored_locale=request.cookies.get(LOCALE_COOKIE),
    )


def localized_error(status_code: int, messages: Messages, key: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=messages.api.get(key))


def _string_fields(body: Any, names: tuple[str, ...]) -> dict[str, str]:
    if not isinstance(body, dict):
        return {}
    return {name: body[name] for name in names if isinstance(body.get(name), str)}


async def read_pass_request(request: Request) -> PassRequest:
    """Read the pass form from a JSON or form-encoded body.

    Unreadable bodies yield an empty request, which the route rejects as
    incomplete.
    """
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            body = await request.json()
        else:
            body = dict(await request.form())
    except (ValueError, MultiPartException) as e:
        logger.info(f"Unreadable pass request body: {e}")
        return PassRequest()

    fields = _string_fields(body, ("name", "phone", "meetingPlace", "meetingDate"))
    return PassRequest.model_validate(fields)


async def read_set_default_request(request: Request) -> SetDefaultRequest:
    try:
        body = await request.json()
    except ValueError as e:
        logger.info(f"Unreadable set-default body: {e}")
        return SetDefaultRequest()

    fields = _string_fields(body, ("password", "eventDate", "place"))
    return SetDefaultRequest.model_validate(fields)
