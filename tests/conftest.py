"""Pytest configuration and shared fixtures."""

import pyotp
import pytest

from twofactor.mfa.service import TwoFactorService
from twofactor.schemas.mfa import TwoFactorState

# RFC 6238 appendix B seed ("12345678901234567890") in base32
RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

# Start of a 30s step: 1_700_000_010 / 30 == 56_666_667
FIXED_NOW = 1_700_000_010


class FixedClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: float = FIXED_NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def code_at(secret: str, when: float) -> str:
    """Reference TOTP code computed independently of the service."""
    return pyotp.TOTP(secret).generate_otp(int(when // 30))


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def persisted() -> list[TwoFactorState]:
    """Records every state handed to the persistence callback."""
    return []


@pytest.fixture
def service(clock: FixedClock, persisted: list[TwoFactorState]) -> TwoFactorService:
    return TwoFactorService(persist=persisted.append, clock=clock, cipher=None)
