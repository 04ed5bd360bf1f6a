"""
Submission recorder.

Persists one visitor record per issued pass, with a fresh serial number,
before any pass is rendered. Phone numbers must already be normalized.
"""

import logging
import re
import uuid
from datetime import date, datetime
from typing import Callable

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError

from app.core.errors import PersistenceFailure, ValidationFailure
from app.domain.schemas import Visitor
from app.repositories.visitor import VisitorRepository

logger = logging.getLogger(__name__)

SERIAL_PREFIX = "CARD-"
UNIQUE_VIOLATION = "23505"
E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


def generate_serial_number() -> str:
    """``CARD-`` followed by a random UUID in hyphenated hex form."""
    return f"{SERIAL_PREFIX}{uuid.uuid4()}"


def parse_meeting_date(value: str) -> date:
    """Calendar date from ``YYYY-MM-DD`` or a full ISO timestamp.

    The whole value must parse; trailing text is rejected.
    """
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
    except ValueError as e:
        raise ValidationFailure("Invalid meeting date", message_key="dateInvalidError") from e


class SubmissionRecorder:
    """Writes visitor records. Each call performs at most one insert."""

    def __init__(self, serial_factory: Callable[[], str] = generate_serial_number):
        self._serial_factory = serial_factory

    def record(
        self,
        name: str,
        phone: str,
        meeting_place: str,
        meeting_date: str,
    ) -> Visitor:
        """Validate and persist a submission.

        Args:
            name: Visitor name, as entered
            phone: E.164 phone number (see app.services.phone.normalize_phone)
            meeting_place: Where the visitor and card owner met
            meeting_date: Submitted date string

        Returns:
            The stored record, including its id and serial number

        Raises:
            ValidationFailure: A field is empty or the date is unparseable
            PersistenceFailure: The insert failed for any reason, including
                a serial number collision
        """
        name = (name or "").strip()
        meeting_place = (meeting_place or "").strip()
        if not (name and meeting_place and phone and meeting_date):
            raise ValidationFailure("name, phone, meetingPlace and meetingDate are required")
        if not E164_PATTERN.match(phone):
            raise ValidationFailure("Phone number is not normalized", message_key="phoneInvalidError")

        day = parse_meeting_date(meeting_date)
        serial_number = self._serial_factory()

        try:
            row = VisitorRepository.create(
                name=name,
                phone=phone,
                meeting_place=meeting_place,
                meeting_date=datetime.combine(day, datetime.min.time()).isoformat(),
                serial_number=serial_number,
            )
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.error(f"Serial number collision on {serial_number}")
            else:
                logger.error(f"Failed to store visitor {serial_number}: {e.message}")
            raise PersistenceFailure("Visitor insert rejected") from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to store visitor {serial_number}: {e}")
            raise PersistenceFailure("Visitor insert failed") from e

        if not row:
            raise PersistenceFailure("Visitor insert returned no row")

        try:
            visitor = Visitor.model_validate(row)
        except ValidationError as e:
            logger.error(f"Stored visitor {serial_number} has an unexpected shape: {e}")
            raise PersistenceFailure("Visitor insert returned an invalid row") from e

        logger.info(f"Recorded visitor {serial_number}")
        return visitor
