"""Tests for boundary request validation and dispatch."""

from unittest.mock import patch

import pytest

from twofactor.boundary import dispatch, parse_request
from twofactor.core.config import settings
from twofactor.core.exceptions import InvalidRequestError, PendingTokenError
from twofactor.mfa.backup_codes import hash_backup_code
from twofactor.mfa.pending_token import create_pending_token
from twofactor.schemas.mfa import (
    ActivateRequest,
    ActivationResult,
    DisableRequest,
    EnrollmentSession,
    EnrollRequest,
    LoginCodeRequest,
    RegenerationResult,
    SecondFactorResult,
    TwoFactorState,
)
from tests.conftest import FIXED_NOW, RFC_SECRET, code_at


class TestParseRequest:
    def test_enroll(self):
        request = parse_request({"kind": "enroll", "account_label": "user@example.com"})
        assert isinstance(request, EnrollRequest)

    def test_activate(self):
        request = parse_request(
            {"kind": "activate", "secret": RFC_SECRET, "backup_codes": ["AAAA-1111"], "code": "123456"}
        )
        assert isinstance(request, ActivateRequest)

    def test_login_defaults(self):
        request = parse_request({"kind": "login", "secret": RFC_SECRET, "code": "123456"})
        assert isinstance(request, LoginCodeRequest)
        assert request.is_backup_code is False
        assert request.hashed_backup_codes == []

    def test_disable(self):
        assert isinstance(parse_request({"kind": "disable"}), DisableRequest)

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"kind": "unknown"},
            {"kind": "enroll"},
            {"kind": "enroll", "account_label": ""},
            {"kind": "disable", "secret": RFC_SECRET},
            {"kind": "activate", "secret": "lowercase-not-base32", "backup_codes": ["A"], "code": "1"},
            {"kind": "activate", "secret": RFC_SECRET, "backup_codes": [], "code": "123456"},
            {"kind": "login", "secret": RFC_SECRET, "code": "1", "hashed_backup_codes": ["not-a-hash"]},
            "enroll",
        ],
    )
    def test_invalid_bodies(self, data):
        with pytest.raises(InvalidRequestError) as exc_info:
            parse_request(data)
        assert exc_info.value.code == "VALIDATION_ERROR"
        assert exc_info.value.details


class TestDispatch:
    def test_full_lifecycle(self, service, persisted):
        session = dispatch(service, {"kind": "enroll", "account_label": "user@example.com"})
        assert isinstance(session, EnrollmentSession)

        activated = dispatch(
            service,
            {
                "kind": "activate",
                "secret": session.secret,
                "backup_codes": session.backup_codes,
                "code": code_at(session.secret, FIXED_NOW),
            },
        )
        assert isinstance(activated, ActivationResult) and activated.success

        login = dispatch(
            service,
            {
                "kind": "login",
                "secret": session.secret,
                "code": session.backup_codes[2].lower(),
                "is_backup_code": True,
                "hashed_backup_codes": activated.hashed_backup_codes,
            },
        )
        assert isinstance(login, SecondFactorResult)
        assert login.valid and len(login.remaining) == 9

        regenerated = dispatch(
            service,
            {"kind": "regenerate", "secret": session.secret, "code": code_at(session.secret, FIXED_NOW)},
        )
        assert isinstance(regenerated, RegenerationResult) and regenerated.success

        disabled = dispatch(service, {"kind": "disable"})
        assert disabled == TwoFactorState.disabled()
        assert [s.enabled for s in persisted] == [True, True, False]

    def test_login_with_totp(self, service):
        result = dispatch(
            service,
            {"kind": "login", "secret": RFC_SECRET, "code": code_at(RFC_SECRET, FIXED_NOW)},
        )
        assert result.valid and result.step is not None

    def test_login_with_unknown_backup_code(self, service):
        hashed = [hash_backup_code("AAAA-1111")]
        result = dispatch(
            service,
            {
                "kind": "login",
                "secret": RFC_SECRET,
                "code": "FFFF-0000",
                "is_backup_code": True,
                "hashed_backup_codes": hashed,
            },
        )
        assert not result.valid and result.remaining == hashed

    def test_login_with_pending_token(self, service):
        with patch.object(settings, "MFA_TOKEN_SECRET", "test-token-secret-0123456789abcdef"):
            token = create_pending_token("acct-5")
            result = dispatch(
                service,
                {
                    "kind": "login",
                    "pending_token": token,
                    "secret": RFC_SECRET,
                    "code": code_at(RFC_SECRET, FIXED_NOW),
                },
            )
        assert isinstance(result, SecondFactorResult) and result.valid

    def test_login_with_forged_pending_token(self, service):
        with patch.object(settings, "MFA_TOKEN_SECRET", "test-token-secret-0123456789abcdef"):
            with pytest.raises(PendingTokenError):
                dispatch(
                    service,
                    {
                        "kind": "login",
                        "pending_token": "forged",
                        "secret": RFC_SECRET,
                        "code": code_at(RFC_SECRET, FIXED_NOW),
                    },
                )
