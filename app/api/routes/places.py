import logging

from fastapi import APIRouter, Depends

from app.api.deps import header_locale, localized_error, preferred_locale, read_set_default_request
from app.core.config import Settings, get_settings
from app.core.errors import MissingCredentials, PassAppError, Unauthorized, ValidationFailure
from app.domain.schemas import FormPrefillResponse, SetDefaultRequest, SuccessResponse
from app.services.localization import SupportedLocale
from app.services.messages import get_messages
from app.services.phone import phone_placeholder, region_for_locale
from app.services.places import DefaultPlaceWriter, get_default_place_for_today

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/form", response_model=FormPrefillResponse)
def get_form_prefill(
    locale: SupportedLocale = Depends(preferred_locale),
    settings: Settings = Depends(get_settings),
):
    """Values the public form starts with: locale, today's place, phone hint."""
    return FormPrefillResponse(
        locale=locale.value,
        default_place=get_default_place_for_today(settings),
        default_region=region_for_locale(locale),
        phone_placeholder=phone_placeholder(locale),
    )


@router.post("/set-default", response_model=SuccessResponse)
def set_default_place(
    body: SetDefaultRequest = Depends(read_set_default_request),
    locale: SupportedLocale = Depends(header_locale),
    settings: Settings = Depends(get_settings),
):
    """Set the default meeting place for a date (admin password required)."""
    messages = get_messages(locale)

    try:
        writer = DefaultPlaceWriter.from_settings(settings)
        writer.set_default_place(body.password, body.event_date, body.place)
    except MissingCredentials:
        logger.error("Default place update attempted but ADMIN_PASSWORD is not set")
        raise localized_error(500, messages, "serverError")
    except Unauthorized:
        logger.warning("Default place update rejected: wrong password")
        raise localized_error(401, messages, "invalidPassword")
    except ValidationFailure as e:
        raise localized_error(400, messages, e.message_key)
    except PassAppError as e:
        logger.error(f"Default place update failed ({type(e).__name__}): {e}")
        raise localized_error(500, messages, "saveError")
    except Exception as e:
        logger.exception(f"Unexpected error setting default place: {e}")
        raise localized_error(500, messages, "saveError")

    return SuccessResponse()
