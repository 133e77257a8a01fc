"""Two-factor exceptions with stable error codes."""

from typing import Any


class TwoFactorError(Exception):
    """Base error carrying a standardized error code."""

    code = "MFA_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        """Initialize two-factor error."""
        super().__init__(message)
        self.code = code or self.code
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Error envelope for callers that serialize errors."""
        return {"code": self.code, "message": self.message, "details": self.details}


class EntropyUnavailableError(TwoFactorError):
    """The system randomness source failed. Fatal, never retried."""

    code = "MFA_ENTROPY"


class ProvisioningError(TwoFactorError):
    """QR enrollment artifact could not be rendered."""

    code = "MFA_PROVISIONING"


class SecretDecryptionError(TwoFactorError):
    """Stored TOTP secret could not be decrypted."""

    code = "MFA_SECRET_DECRYPT"


class PendingTokenError(TwoFactorError):
    """Pending second-factor token is malformed, expired or of the wrong type."""

    code = "MFA_TOKEN_INVALID"


class InvalidRequestError(TwoFactorError):
    """Boundary request body failed validation."""

    code = "VALIDATION_ERROR"
