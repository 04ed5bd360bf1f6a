import logging

from fastapi import APIRouter, Depends, Response

from app.api.deps import get_pass_signer, header_locale, localized_error, read_pass_request
from app.core.config import Settings, get_settings
from app.core.errors import PassAppError, ValidationFailure
from app.domain.schemas import PassRequest
from app.services.localization import SupportedLocale
from app.services.messages import get_messages
from app.services.pass_generator import PKPASS_MEDIA_TYPE, create_pass_generator
from app.services.pass_signer import PassSigner
from app.services.phone import normalize_phone
from app.services.submission import SubmissionRecorder

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
def issue_pass(
    body: PassRequest = Depends(read_pass_request),
    locale: SupportedLocale = Depends(header_locale),
    settings: Settings = Depends(get_settings),
    signer: PassSigner = Depends(get_pass_signer),
):
    """Record a visitor and return their business card pass."""
    messages = get_messages(locale)

    if not body.is_complete():
        raise localized_error(400, messages, "passFieldsError")

    try:
        phone = normalize_phone(body.phone, locale)
        visitor = SubmissionRecorder().record(
            name=body.name,
            phone=phone,
            meeting_place=body.meeting_place,
            meeting_date=body.meeting_date,
        )
        # The visitor row is committed; failures below leave it in place
        generator = create_pass_generator(settings, signer=signer)
        rendered = generator.generate_pass(visitor, messages)
    except ValidationFailure as e:
        raise localized_error(400, messages, e.message_key)
    except PassAppError as e:
        logger.error(f"Pass issuance failed ({type(e).__name__}): {e}")
        raise localized_error(500, messages, "passGenerateError")
    except Exception as e:
        logger.exception(f"Unexpected error issuing pass: {e}")
        raise localized_error(500, messages, "passGenerateError")

    return Response(
        content=rendered.content,
        media_type=PKPASS_MEDIA_TYPE,
        headers={"Content-Disposition": rendered.content_disposition},
    )
