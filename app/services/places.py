"""
Default meeting place lookup and administration.

"Today" is always computed in a fixed, configured timezone. Neither the
client's clock nor the server process's local timezone can move it.
"""

import hmac
import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError

from app.core.config import Settings
from app.core.errors import MissingCredentials, PersistenceFailure, Unauthorized, ValidationFailure
from app.domain.schemas import DefaultPlace
from app.repositories.default_place import DefaultPlaceRepository

logger = logging.getLogger(__name__)


def today_in_timezone(tz_name: str, now: Optional[datetime] = None) -> str:
    """Current calendar date in ``tz_name`` as ``YYYY-MM-DD``."""
    tz = ZoneInfo(tz_name)
    moment = now.astimezone(tz) if now else datetime.now(tz)
    return moment.date().isoformat()


def get_default_place_for_today(settings: Settings, now: Optional[datetime] = None) -> Optional[str]:
    """Place configured for today, or None when no default is set.

    The value only pre-fills the form, so a storage error is logged and
    treated as "no default".
    """
    event_date = today_in_timezone(settings.default_place_timezone, now)
    try:
        row = DefaultPlaceRepository.get_by_date(event_date)
    except Exception as e:
        logger.warning(f"Default place lookup failed for {event_date}: {e}")
        return None

    if not row:
        return None
    return row.get("place")


def parse_event_date(value: str) -> str:
    """Canonical ``YYYY-MM-DD`` form of a submitted date or ISO timestamp."""
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date().isoformat()
    except ValueError as e:
        raise ValidationFailure("Invalid event date", message_key="dateInvalidError") from e


class DefaultPlaceWriter:
    """The only mutation path for default places. Requires the admin secret."""

    def __init__(self, admin_password: str):
        self._admin_password = admin_password

    @classmethod
    def from_settings(cls, settings: Settings) -> "DefaultPlaceWriter":
        if not settings.admin_password:
            raise MissingCredentials("ADMIN_PASSWORD is not configured")
        return cls(settings.admin_password)

    def check_password(self, password: Optional[str]) -> None:
        supplied = (password or "").encode("utf-8")
        if not hmac.compare_digest(supplied, self._admin_password.encode("utf-8")):
            raise Unauthorized("Admin password mismatch")

    def set_default_place(
        self,
        password: Optional[str],
        event_date: Optional[str],
        place: Optional[str],
    ) -> DefaultPlace:
        """Upsert the place for a date.

        Checks run in order: password, then presence of date and place, then
        date format. Repeating a call with the same inputs leaves the same
        end state.
        """
        self.check_password(password)

        if not (event_date and event_date.strip() and place and place.strip()):
            raise ValidationFailure("eventDate and place are required", message_key="missingFields")

        canonical_date = parse_event_date(event_date)
        try:
            row = DefaultPlaceRepository.upsert(canonical_date, place.strip())
        except (APIError, httpx.HTTPError, PersistenceFailure) as e:
            logger.error(f"Failed to save default place for {canonical_date}: {e}")
            raise PersistenceFailure("Default place upsert failed", message_key="saveError") from e

        if not row:
            raise PersistenceFailure("Default place upsert returned no row", message_key="saveError")

        try:
            default_place = DefaultPlace.model_validate(row)
        except ValidationError as e:
            logger.error(f"Stored default place for {canonical_date} has an unexpected shape: {e}")
            raise PersistenceFailure("Default place upsert returned an invalid row", message_key="saveError") from e

        logger.info(f"Default place set for {canonical_date}")
        return default_place
