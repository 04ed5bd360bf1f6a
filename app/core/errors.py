"""
Domain errors for pass issuance and default-place administration.

Every error names the key of the localized API message (``api.<key>`` in the
message catalogs) that the request boundary shows to the caller. Internal
detail stays in the exception chain and the logs.
"""


class PassAppError(Exception):
    """Base class for all domain errors."""

    message_key = "passGenerateError"

    def __init__(self, detail: str = "", message_key: str | None = None):
        super().__init__(detail or self.__class__.__name__)
        if message_key:
            self.message_key = message_key


class ValidationFailure(PassAppError):
    """Malformed or missing required input."""

    message_key = "passFieldsError"


class PhoneInvalid(ValidationFailure):
    """Phone number could not be parsed or is not valid for its region."""

    message_key = "phoneInvalidError"


class Unauthorized(PassAppError):
    message_key = "invalidPassword"


class PersistenceFailure(PassAppError):
    """The storage engine rejected or could not complete a write."""

    message_key = "passGenerateError"


class MissingCredentials(PassAppError):
    """A required secret is absent from configuration."""

    message_key = "serverError"


class RenderFailure(PassAppError):
    message_key = "passGenerateError"


class SigningError(RenderFailure):
    pass
