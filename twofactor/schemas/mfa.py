"""MFA schemas: boundary requests and the values the core hands back."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

HashedCode = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{64}$")]
Base32Secret = Annotated[str, StringConstraints(pattern=r"^[A-Z2-7]{32,}$")]


# ---------------------------------------------------------------------------
# Values produced by the core
# ---------------------------------------------------------------------------


class EnrollmentSession(BaseModel):
    """Setup material for one enrollment attempt.

    Held by the caller (e.g. in a short-lived session) between
    ``initiate_enrollment`` and ``verify_session``. Never persisted by the core.
    """

    model_config = ConfigDict(frozen=True)

    secret: str = Field(repr=False)
    backup_codes: list[str] = Field(repr=False)  # cleartext, shown once
    provisioning_uri: str = Field(repr=False)
    qr_code: str = Field(repr=False)  # data:image/png;base64,...


class TwoFactorState(BaseModel):
    """What the caller must persist for the account."""

    model_config = ConfigDict(frozen=True)

    secret: str | None = Field(default=None, repr=False)  # encrypted when a cipher is configured
    hashed_backup_codes: list[str] | None = None
    enabled: bool = False

    @classmethod
    def disabled(cls) -> "TwoFactorState":
        return cls(secret=None, hashed_backup_codes=None, enabled=False)


class ActivationResult(BaseModel):
    """Outcome of verifying an enrollment."""

    success: bool
    hashed_backup_codes: list[str] | None = None
    backup_codes: list[str] | None = Field(default=None, repr=False)  # return once
    state: TwoFactorState | None = None


class BackupCodeCheck(BaseModel):
    """Result of checking a backup code against the stored hashes."""

    valid: bool
    remaining: list[str]

    @property
    def remaining_count(self) -> int:
        return len(self.remaining)


class SecondFactorResult(BaseModel):
    """Login-time check with either a TOTP or a backup code."""

    valid: bool
    remaining: list[str] | None = None  # set for backup codes; persist when valid
    step: int | None = None  # accepted TOTP step, for replay high-water marks


class RegenerationResult(BaseModel):
    """Fresh backup codes issued for an already enabled account."""

    success: bool
    hashed_backup_codes: list[str] | None = None
    backup_codes: list[str] | None = Field(default=None, repr=False)


# ---------------------------------------------------------------------------
# Boundary requests
# ---------------------------------------------------------------------------


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class EnrollRequest(_Request):
    """Start 2FA setup."""

    kind: Literal["enroll"] = "enroll"
    account_label: str = Field(min_length=1, max_length=320)
    issuer: str | None = Field(default=None, min_length=1, max_length=100)


class ActivateRequest(_Request):
    """Confirm possession of the authenticator and enable 2FA."""

    kind: Literal["activate"] = "activate"
    secret: Base32Secret
    backup_codes: list[str] = Field(min_length=1)
    code: str = Field(max_length=32)


class LoginCodeRequest(_Request):
    """Second factor presented at login time."""

    kind: Literal["login"] = "login"
    secret: str = Field(min_length=1)
    code: str = Field(max_length=32)
    is_backup_code: bool = False
    hashed_backup_codes: list[HashedCode] = Field(default_factory=list)
    last_used_step: int | None = None
    pending_token: str | None = Field(default=None, min_length=1)
    email: str | None = None


class RegenerateRequest(_Request):
    """Replace the backup-code set after a fresh TOTP check."""

    kind: Literal["regenerate"] = "regenerate"
    secret: str = Field(min_length=1)
    code: str = Field(max_length=32)


class DisableRequest(_Request):
    """Turn 2FA off for the account."""

    kind: Literal["disable"] = "disable"


TwoFactorRequest = Annotated[
    Union[EnrollRequest, ActivateRequest, LoginCodeRequest, RegenerateRequest, DisableRequest],
    Field(discriminator="kind"),
]
