"""
Message catalogs for passes and API responses.

Each supported locale ships a JSON catalog in app/messages/. Catalogs are
validated against a fixed shape when first loaded, so a missing or misspelt
key fails at startup instead of in the middle of a request.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from app.services.localization import SupportedLocale

logger = logging.getLogger(__name__)

MESSAGES_DIR = Path(__file__).parent.parent / "messages"


class _Catalog(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class PassMessages(_Catalog):
    organization_name: str
    description: str
    phone_label: str
    email_label: str
    homepage_label: str
    homepage_url: str
    linkedin_label: str
    instagram_label: str
    kakao_label: str
    meeting_place_label: str
    meeting_date_label: str
    last_updated_label: str
    filename: str


class ApiMessages(_Catalog):
    pass_fields_error: str
    pass_generate_error: str
    phone_invalid_error: str
    date_invalid_error: str
    server_error: str
    invalid_password: str
    missing_fields: str
    save_error: str

    def get(self, key: str) -> str:
        """Look up a message by its catalog key (camelCase)."""
        for name in type(self).model_fields:
            if key in (name, to_camel(name)):
                return getattr(self, name)
        return self.server_error


class Messages(_Catalog):
    date_format: str
    pass_: PassMessages = Field(alias="pass")
    api: ApiMessages

    @field_validator("date_format")
    @classmethod
    def _has_date_placeholders(cls, value: str) -> str:
        for placeholder in ("{year}", "{month}", "{day}"):
            if placeholder not in value:
                raise ValueError(f"dateFormat is missing {placeholder}")
        return value


class CatalogError(RuntimeError):
    pass


def _load_catalog(locale: SupportedLocale) -> Messages:
    path = MESSAGES_DIR / f"{locale.value}.json"
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return Messages.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise CatalogError(f"Invalid message catalog for {locale.value}: {e}") from e


@lru_cache
def load_catalogs() -> dict[SupportedLocale, Messages]:
    """Load and validate the catalog of every supported locale."""
    catalogs = {locale: _load_catalog(locale) for locale in SupportedLocale}
    logger.info(f"Loaded {len(catalogs)} message catalogs")
    return catalogs


def get_messages(locale: SupportedLocale) -> Messages:
    return load_catalogs()[locale]
