"""
Pass renderer.

Builds the pass.json descriptor for a stored visitor record in the visitor's
language and hands it, with the card artwork and signing credentials, to a
PassSigner. The visitor record is already durable when this runs; a
rendering failure never touches it.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional
from urllib.parse import quote
from zoneinfo import ZoneInfo

from app.core.config import Settings
from app.core.errors import RenderFailure
from app.domain.schemas import Visitor
from app.services.certificate_manager import SigningCredentials, load_signing_credentials
from app.services.messages import Messages
from app.services.pass_signer import OpenSSLPassSigner, PassSigner

logger = logging.getLogger(__name__)

PKPASS_MEDIA_TYPE = "application/vnd.apple.pkpass"
FALLBACK_FILENAME = "BusinessCard.pkpass"

# Archive name -> artwork file in the assets directory
ASSET_FILES = {
    "icon.png": "photo.png",
    "icon@2x.png": "photo@2x.png",
    "icon@3x.png": "photo@3x.png",
    "logo.png": "photo.png",
    "logo@2x.png": "photo@2x.png",
    "logo@3x.png": "photo@3x.png",
    "strip.png": "strip.png",
    "strip@2x.png": "strip@2x.png",
    "strip@3x.png": "strip@3x.png",
}


@dataclass(frozen=True)
class RenderedPass:
    content: bytes
    filename: str

    @property
    def content_disposition(self) -> str:
        return (
            f'attachment; filename="{FALLBACK_FILENAME}"; '
            f"filename*=UTF-8''{quote(self.filename, safe='')}"
        )


def load_pass_assets(assets_dir: Path) -> dict[str, bytes]:
    """Load icon, logo and strip artwork in 1x/2x/3x."""
    cache: dict[str, bytes] = {}
    files = {}
    for archive_name, source in ASSET_FILES.items():
        if source not in cache:
            path = Path(assets_dir) / source
            try:
                cache[source] = path.read_bytes()
            except OSError as e:
                raise RenderFailure(f"Pass asset {source} not readable") from e
        files[archive_name] = cache[source]
    return files


def format_date(day: date, messages: Messages) -> str:
    """Render a date with the locale's ``{year}``/``{month}``/``{day}`` template."""
    return (
        messages.date_format
        .replace("{year}", str(day.year))
        .replace("{month}", str(day.month))
        .replace("{day}", str(day.day))
    )


class PassGenerator:
    def __init__(
        self,
        credentials: SigningCredentials,
        assets: dict[str, bytes],
        settings: Settings,
        signer: Optional[PassSigner] = None,
    ):
        self.credentials = credentials
        self.assets = assets
        self.settings = settings
        self.signer = signer or OpenSSLPassSigner(settings.openssl_bin)
        self.tz = ZoneInfo(settings.default_place_timezone)

    def _contact_fields(self, messages: Messages) -> list[dict]:
        labels = messages.pass_
        contacts = [
            ("email_full", labels.email_label, self.settings.contact_email),
            ("phone_full", labels.phone_label, self.settings.contact_phone),
            ("homepage", labels.homepage_label, labels.homepage_url),
            ("linkedin", labels.linkedin_label, self.settings.contact_linkedin),
            ("instagram", labels.instagram_label, self.settings.contact_instagram),
            ("kakao", labels.kakao_label, self.settings.contact_kakao_url),
        ]
        return [
            {"key": key, "label": label, "value": value}
            for key, label, value in contacts
            if value
        ]

    def create_pass_json(self, visitor: Visitor, messages: Messages, today: date) -> dict:
        """Create the pass.json content.

        Identity and colors come from configuration only; the visitor record
        contributes the serial number, meeting place and meeting date.
        """
        labels = messages.pass_

        secondary_fields = []
        if self.settings.contact_phone:
            secondary_fields.append({
                "key": "phone",
                "label": labels.phone_label,
                "value": self.settings.contact_phone,
            })

        back_fields = self._contact_fields(messages) + [
            {
                "key": "meeting_place_back",
                "label": labels.meeting_place_label,
                "value": visitor.meeting_place,
            },
            {
                "key": "meeting_date_back",
                "label": labels.meeting_date_label,
                "value": format_date(visitor.meeting_date.date(), messages),
            },
            {
                "key": "updated",
                "label": labels.last_updated_label,
                "value": format_date(today, messages),
            },
        ]

        return {
            "formatVersion": 1,
            "passTypeIdentifier": self.credentials.pass_type_identifier,
            "teamIdentifier": self.credentials.team_identifier,
            "serialNumber": visitor.serial_number,
            "organizationName": labels.organization_name,
            "description": labels.description,
            "logoText": self.settings.logo_text,
            "foregroundColor": self.settings.foreground_color,
            "backgroundColor": self.settings.background_color,
            "labelColor": self.settings.label_color,
            "storeCard": {
                "secondaryFields": secondary_fields,
                "backFields": back_fields,
            },
        }

    def generate_pass(
        self,
        visitor: Visitor,
        messages: Messages,
        now: Optional[datetime] = None,
    ) -> RenderedPass:
        """Generate a complete .pkpass file for a stored visitor.

        The "last updated" field carries the render date, not the
        submission date.
        """
        moment = now.astimezone(self.tz) if now else datetime.now(self.tz)
        pass_json = self.create_pass_json(visitor, messages, moment.date())

        try:
            content = self.signer.sign(self.assets, self.credentials, pass_json)
        except RenderFailure:
            raise
        except Exception as e:
            raise RenderFailure(f"Pass signing failed for {visitor.serial_number}") from e

        logger.info(f"Rendered pass {visitor.serial_number}")
        return RenderedPass(content=content, filename=f"{messages.pass_.filename}.pkpass")


def create_pass_generator(settings: Settings, signer: Optional[PassSigner] = None) -> PassGenerator:
    """Factory function to create PassGenerator from settings.

    Raises:
        MissingCredentials: Signing configuration is incomplete
        RenderFailure: Credentials or artwork cannot be loaded
    """
    return PassGenerator(
        credentials=load_signing_credentials(settings),
        assets=load_pass_assets(settings.pass_assets_dir),
        settings=settings,
        signer=signer,
    )
