"""
Signing credentials for Apple Wallet passes.

Handles:
- Decoding base64 certificate/key configuration into PEM
- Parsing the PEM material once so broken configuration fails early
- Collecting everything the signer needs into one immutable value
"""

import base64
import binascii
import logging
import re
import textwrap
from dataclasses import dataclass
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from app.core.config import Settings
from app.core.errors import MissingCredentials, RenderFailure

logger = logging.getLogger(__name__)

_PEM_BEGIN = re.compile(rb"-----BEGIN ([A-Z0-9 ]+)-----")


@dataclass(frozen=True)
class SigningCredentials:
    pass_type_identifier: str
    team_identifier: str
    signer_cert_pem: bytes
    signer_key_pem: bytes
    wwdr_cert_pem: bytes
    key_passphrase: Optional[str] = None


def _contains_pem_block(data: bytes, block_type: str) -> bool:
    """True if ``data`` holds a PEM block whose label ends with ``block_type``.

    "PRIVATE KEY" matches RSA/EC/ENCRYPTED private key blocks too.
    """
    return any(
        label.decode("ascii").endswith(block_type)
        for label in _PEM_BEGIN.findall(data)
    )


def decode_base64_to_pem(value: str, block_type: str) -> bytes:
    """Turn base64 configuration text into PEM bytes.

    If the decoded bytes are already PEM of the expected type they are used
    as-is. Otherwise the payload is treated as DER: re-encoded to normalise
    line structure and wrapped in a 64-column PEM envelope.
    """
    try:
        decoded = base64.b64decode(value.strip(), validate=False)
    except (binascii.Error, ValueError) as e:
        raise RenderFailure(f"{block_type} is not valid base64") from e

    if _contains_pem_block(decoded, block_type):
        return decoded

    body = "\n".join(textwrap.wrap(base64.b64encode(decoded).decode("ascii"), 64))
    return f"-----BEGIN {block_type}-----\n{body}\n-----END {block_type}-----\n".encode("ascii")


def _check_material(credentials: SigningCredentials) -> None:
    password = credentials.key_passphrase.encode() if credentials.key_passphrase else None
    try:
        x509.load_pem_x509_certificate(credentials.signer_cert_pem)
        x509.load_pem_x509_certificate(credentials.wwdr_cert_pem)
        load_pem_private_key(credentials.signer_key_pem, password=password)
    except (ValueError, TypeError) as e:
        raise RenderFailure("Signing certificate or key could not be parsed") from e


def load_signing_credentials(settings: Settings) -> SigningCredentials:
    """Build SigningCredentials from settings.

    Raises:
        MissingCredentials: A required setting is empty
        RenderFailure: Material is present but unreadable
    """
    required = {
        "PASS_CERTIFICATE_PEM_BASE64": settings.pass_certificate_pem_base64,
        "PASS_KEY_PEM_BASE64": settings.pass_key_pem_base64,
        "WWDR_CERTIFICATE_PEM_BASE64": settings.wwdr_certificate_pem_base64,
        "PASS_TYPE_IDENTIFIER": settings.pass_type_identifier,
        "TEAM_IDENTIFIER": settings.team_identifier,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise MissingCredentials(f"Missing signing configuration: {', '.join(missing)}")

    credentials = SigningCredentials(
        pass_type_identifier=settings.pass_type_identifier,
        team_identifier=settings.team_identifier,
        signer_cert_pem=decode_base64_to_pem(settings.pass_certificate_pem_base64, "CERTIFICATE"),
        signer_key_pem=decode_base64_to_pem(settings.pass_key_pem_base64, "PRIVATE KEY"),
        wwdr_cert_pem=decode_base64_to_pem(settings.wwdr_certificate_pem_base64, "CERTIFICATE"),
        key_passphrase=settings.pass_key_passphrase or None,
    )
    _check_material(credentials)
    return credentials


def check_signing_configuration(settings: Settings) -> bool:
    """Log whether pass signing is usable. Called once at startup."""
    try:
        load_signing_credentials(settings)
    except MissingCredentials as e:
        logger.warning(f"Pass signing disabled: {e}")
        return False
    except RenderFailure as e:
        logger.error(f"Pass signing misconfigured: {e}")
        return False
    logger.info("Pass signing credentials loaded")
    return True
