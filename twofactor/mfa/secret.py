"""TOTP shared-secret generation."""

import pyotp

from twofactor.core.config import settings
from twofactor.core.exceptions import EntropyUnavailableError


def generate_totp_secret(length: int | None = None) -> str:
    """Generate a new base32 TOTP secret (no padding, 32 chars = 160 bits by default)."""
    if length is None:
        length = settings.MFA_SECRET_LENGTH
    try:
        return pyotp.random_base32(length=length)
    except (OSError, NotImplementedError) as e:
        raise EntropyUnavailableError("System randomness source unavailable") from e
