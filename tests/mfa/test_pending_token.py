"""Tests for second-factor pending tokens."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
import pytest

from twofactor.core.config import settings
from twofactor.core.exceptions import PendingTokenError
from twofactor.mfa.pending_token import create_pending_token, verify_pending_token


@pytest.fixture(autouse=True)
def token_secret():
    with patch.object(settings, "MFA_TOKEN_SECRET", "test-token-secret-0123456789abcdef"):
        yield "test-token-secret-0123456789abcdef"


def test_round_trip():
    token = create_pending_token("acct-1", email="user@example.com")
    payload = verify_pending_token(token, email="user@example.com")
    assert payload["sub"] == "acct-1"
    assert payload["type"] == "mfa_pending"


def test_expired_token_rejected():
    issued = datetime.now(timezone.utc) - timedelta(minutes=settings.MFA_TOKEN_EXPIRE_MINUTES + 1)
    token = create_pending_token("acct-1", now=issued)
    with pytest.raises(PendingTokenError, match="expired"):
        verify_pending_token(token)


def test_wrong_type_rejected(token_secret):
    token = jwt.encode({"sub": "acct-1", "type": "access"}, token_secret, algorithm="HS256")
    with pytest.raises(PendingTokenError, match="not an MFA pending token"):
        verify_pending_token(token)


def test_bad_signature_rejected():
    token = jwt.encode({"sub": "acct-1", "type": "mfa_pending"}, "other-token-secret-0123456789abcdef", algorithm="HS256")
    with pytest.raises(PendingTokenError):
        verify_pending_token(token)


def test_email_mismatch_rejected():
    token = create_pending_token("acct-1", email="user@example.com")
    with pytest.raises(PendingTokenError):
        verify_pending_token(token, email="someone@example.com")


def test_missing_secret():
    with patch.object(settings, "MFA_TOKEN_SECRET", None):
        with pytest.raises(PendingTokenError) as exc_info:
            create_pending_token("acct-1")
    assert exc_info.value.code == "MFA_TOKEN_NOT_CONFIGURED"
