"""Provisioning URI and QR enrollment artifact."""

import base64
from io import BytesIO

import pyotp
import qrcode

from twofactor.core.config import settings
from twofactor.core.exceptions import ProvisioningError
from twofactor.core.logging import get_logger

logger = get_logger(__name__)

DATA_URL_PREFIX = "data:image/png;base64,"


def generate_totp_provisioning_uri(secret: str, account_label: str, issuer: str | None = None) -> str:
    """Generate the otpauth://totp/{issuer}:{label}?secret=...&issuer=... URI.

    The label is echoed as-is (percent-encoded); it is not validated as an email.
    """
    totp = pyotp.TOTP(secret, digits=settings.MFA_TOTP_DIGITS, interval=settings.MFA_TOTP_PERIOD)
    return totp.provisioning_uri(
        name=account_label,
        issuer_name=issuer or settings.MFA_TOTP_ISSUER,
    )


def render_qr_data_url(uri: str) -> str:
    """Render ``uri`` as a QR code PNG and return it as a base64 data URL."""
    try:
        img = qrcode.make(uri)
        buf = BytesIO()
        img.save(buf, "PNG")
    except Exception as e:
        logger.error("QR code rendering failed", extra={"error_type": type(e).__name__})
        raise ProvisioningError("Could not render QR code for enrollment") from e
    return DATA_URL_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")


def build_provisioning(secret: str, account_label: str, issuer: str | None = None) -> tuple[str, str]:
    """Return ``(provisioning_uri, qr_data_url)`` for an enrollment."""
    uri = generate_totp_provisioning_uri(secret, account_label, issuer)
    return uri, render_qr_data_url(uri)
