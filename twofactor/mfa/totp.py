"""TOTP verification with a bounded clock-skew window.

Codes are the RFC 6238 defaults authenticator apps expect: HMAC-SHA1, six
digits, 30 second steps. A code is accepted for the current step and
``window`` steps either side of it.
"""

import re
import time
from collections.abc import Callable

import pyotp
from pyotp.utils import strings_equal

from twofactor.core.config import settings
from twofactor.core.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


def time_step(now: float, period: int | None = None) -> int:
    """Counter for the step containing unix time ``now``."""
    return int(now // (period or settings.MFA_TOTP_PERIOD))


def _totp(secret: str) -> pyotp.TOTP:
    return pyotp.TOTP(secret, digits=settings.MFA_TOTP_DIGITS, interval=settings.MFA_TOTP_PERIOD)


def generate_totp_code(secret: str, now: float | None = None) -> str:
    """Code for ``secret`` at unix time ``now`` (defaults to the current time)."""
    if now is None:
        now = time.time()
    return _totp(secret).generate_otp(time_step(now))


def match_totp_step(
    code: str,
    secret: str,
    *,
    now: float | None = None,
    window: int | None = None,
    after_step: int | None = None,
) -> int | None:
    """Return the time step ``code`` is valid for, or None.

    Steps at or below ``after_step`` are never matched, which lets callers
    keep a per-account high-water mark against replays.
    Malformed codes or secrets are a plain miss, never an exception.
    """
    if window is None:
        window = settings.MFA_TOTP_VALID_WINDOW
    if now is None:
        now = time.time()

    if not isinstance(code, str) or not re.fullmatch(rf"[0-9]{{{settings.MFA_TOTP_DIGITS}}}", code):
        return None
    if not isinstance(secret, str) or not secret:
        return None

    try:
        totp = _totp(secret)
        current = time_step(now)
        for step in range(max(current - window, 0), current + window + 1):
            if after_step is not None and step <= after_step:
                continue
            if strings_equal(code, totp.generate_otp(step)):
                return step
    except Exception as e:
        logger.warning("TOTP verification error", extra={"error_type": type(e).__name__})
    return None


def verify_totp_code(
    code: str,
    secret: str,
    *,
    now: float | None = None,
    window: int | None = None,
) -> bool:
    """Verify TOTP code with clock drift tolerance (±1 timestep by default)."""
    return match_totp_step(code, secret, now=now, window=window) is not None
