"""Short-lived "second factor pending" login tokens.

Issued after a successful password check for an account with 2FA enabled and
exchanged for a full session once a TOTP or backup code has been validated.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt

from twofactor.core.config import settings
from twofactor.core.exceptions import PendingTokenError

TOKEN_TYPE = "mfa_pending"


def _signing_key() -> str:
    if not settings.MFA_TOKEN_SECRET:
        raise PendingTokenError("MFA_TOKEN_SECRET must be set", code="MFA_TOKEN_NOT_CONFIGURED")
    return settings.MFA_TOKEN_SECRET


def create_pending_token(account_id: str, email: str | None = None, now: datetime | None = None) -> str:
    """Create a short-lived MFA pending token (JWT)."""
    key = _signing_key()

    now = now or datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.MFA_TOKEN_EXPIRE_MINUTES)

    payload: dict[str, Any] = {
        "sub": str(account_id),
        "iat": now,
        "exp": expire,
        "jti": str(uuid4()),
        "type": TOKEN_TYPE,
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, key, algorithm=settings.MFA_TOKEN_ALG)


def verify_pending_token(token: str, email: str | None = None) -> dict[str, Any]:
    """Verify and decode an MFA pending token.

    When ``email`` is given the token must have been issued for that address.
    """
    key = _signing_key()

    try:
        payload = jwt.decode(token, key, algorithms=[settings.MFA_TOKEN_ALG])
    except jwt.ExpiredSignatureError as e:
        raise PendingTokenError("MFA token has expired") from e
    except jwt.InvalidTokenError as e:
        raise PendingTokenError("Invalid MFA token") from e

    if payload.get("type") != TOKEN_TYPE:
        raise PendingTokenError("Token is not an MFA pending token")
    if email is not None and payload.get("email") != email:
        raise PendingTokenError("MFA token was issued for a different account")
    return payload
