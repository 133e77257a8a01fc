"""Two-factor enrollment lifecycle.

``Disabled -> initiate -> PendingVerification -> verify ok -> Enabled`` and
``Enabled -> disable -> Disabled``. The pending state only exists in the
``EnrollmentSession`` the caller holds; the account's durable state does not
change until a correct TOTP has been presented against the new secret.

The service owns no mutable state. Persistence goes through the optional
``persist`` callback, which receives a ``TwoFactorState`` to commit
atomically. Backup-code consumption returns the reduced hash list instead of
persisting it: the caller must serialize read-modify-write of that list per
account (optimistic version check or a per-account lock).
"""

import time
from collections.abc import Callable, Sequence

from twofactor.core.config import settings
from twofactor.core.exceptions import PendingTokenError, SecretDecryptionError
from twofactor.core.logging import get_logger
from twofactor.core.security_logging import log_security_event
from twofactor.mfa.backup_codes import generate_backup_codes, hash_backup_code, verify_and_consume
from twofactor.mfa.crypto import SecretCipher, get_cipher
from twofactor.mfa.pending_token import verify_pending_token
from twofactor.mfa.provisioning import build_provisioning
from twofactor.mfa.secret import generate_totp_secret
from twofactor.mfa.totp import Clock, match_totp_step
from twofactor.schemas.mfa import (
    ActivationResult,
    BackupCodeCheck,
    EnrollmentSession,
    RegenerationResult,
    SecondFactorResult,
    TwoFactorState,
)

logger = get_logger(__name__)

PersistCallback = Callable[[TwoFactorState], None]

_UNSET = object()


class TwoFactorService:
    """Entry point the surrounding application calls for 2FA."""

    def __init__(
        self,
        persist: PersistCallback | None = None,
        clock: Clock = time.time,
        cipher: SecretCipher | None | object = _UNSET,
        issuer: str | None = None,
        backup_code_count: int | None = None,
    ):
        self.persist = persist
        self.clock = clock
        self.cipher = get_cipher() if cipher is _UNSET else cipher
        self.issuer = issuer or settings.MFA_TOTP_ISSUER
        self.backup_code_count = (
            settings.MFA_BACKUP_CODES_COUNT if backup_code_count is None else backup_code_count
        )

    # -- enrollment ---------------------------------------------------------

    def initiate_enrollment(
        self,
        account_label: str,
        account_id: str | None = None,
        issuer: str | None = None,
    ) -> EnrollmentSession:
        """Generate setup material. Nothing is persisted."""
        secret = generate_totp_secret()
        backup_codes = generate_backup_codes(self.backup_code_count)
        provisioning_uri, qr_code = build_provisioning(secret, account_label, issuer or self.issuer)

        log_security_event(event_type="mfa_setup_started", outcome="allow", account_id=account_id)

        return EnrollmentSession(
            secret=secret,
            backup_codes=backup_codes,
            provisioning_uri=provisioning_uri,
            qr_code=qr_code,
        )

    def verify_and_activate(
        self,
        secret: str,
        backup_codes: Sequence[str],
        submitted_code: str,
        account_id: str | None = None,
    ) -> ActivationResult:
        """Confirm the authenticator holds ``secret`` and enable 2FA.

        On success the persistence callback receives the secret and hashed
        backup codes, and the cleartext codes are returned for one-time
        display. On failure nothing is persisted.
        """
        if match_totp_step(submitted_code, secret, now=self.clock()) is None:
            log_security_event(
                event_type="mfa_failed",
                outcome="deny",
                reason_code="MFA_INVALID",
                account_id=account_id,
            )
            return ActivationResult(success=False)

        hashed = [hash_backup_code(code) for code in backup_codes]
        state = TwoFactorState(secret=self._seal(secret), hashed_backup_codes=hashed, enabled=True)
        self._commit(state)

        log_security_event(
            event_type="mfa_enabled",
            outcome="allow",
            account_id=account_id,
            backup_code_count=len(hashed),
        )

        return ActivationResult(
            success=True,
            hashed_backup_codes=hashed,
            backup_codes=list(backup_codes),
            state=state,
        )

    def verify_session(
        self,
        session: EnrollmentSession,
        submitted_code: str,
        account_id: str | None = None,
    ) -> ActivationResult:
        """``verify_and_activate`` for a session returned by ``initiate_enrollment``."""
        return self.verify_and_activate(session.secret, session.backup_codes, submitted_code, account_id)

    def disable(self, account_id: str | None = None) -> TwoFactorState:
        """Clear secret and backup codes. No re-verification is done here."""
        state = TwoFactorState.disabled()
        self._commit(state)
        log_security_event(event_type="mfa_disabled", outcome="allow", account_id=account_id)
        return state

    # -- login --------------------------------------------------------------

    def verify_login(self, secret: str, submitted_code: str, account_id: str | None = None) -> bool:
        """Check a TOTP code against the stored secret."""
        return self.verify_login_step(secret, submitted_code, account_id=account_id) is not None

    def verify_login_step(
        self,
        secret: str,
        submitted_code: str,
        last_used_step: int | None = None,
        account_id: str | None = None,
    ) -> int | None:
        """Like ``verify_login`` but returns the accepted step.

        Codes for steps at or below ``last_used_step`` are rejected; persist
        the returned step to stop a captured code being replayed within its
        window.
        """
        step = None
        plain = self._open(secret)
        if plain is not None:
            step = match_totp_step(submitted_code, plain, now=self.clock(), after_step=last_used_step)

        if step is None:
            log_security_event(
                event_type="mfa_login_failed",
                outcome="deny",
                reason_code="MFA_INVALID",
                account_id=account_id,
                method="totp",
            )
        else:
            log_security_event(event_type="mfa_login_success", outcome="allow", account_id=account_id, method="totp")
        return step

    def verify_backup_code(
        self,
        submitted_code: str,
        hashed_codes: Sequence[str] | None,
        account_id: str | None = None,
    ) -> BackupCodeCheck:
        """Check and consume a backup code. Persist ``remaining`` when valid."""
        check = verify_and_consume(submitted_code, hashed_codes)

        if check.valid:
            log_security_event(
                event_type="mfa_backup_code_used",
                outcome="allow",
                account_id=account_id,
                remaining=check.remaining_count,
            )
        else:
            log_security_event(
                event_type="mfa_login_failed",
                outcome="deny",
                reason_code="MFA_INVALID",
                account_id=account_id,
                method="backup_code",
            )
        return check

    def verify_second_factor(
        self,
        secret: str,
        hashed_codes: Sequence[str] | None,
        submitted_code: str,
        is_backup_code: bool = False,
        last_used_step: int | None = None,
        account_id: str | None = None,
    ) -> SecondFactorResult:
        """Login check with either a TOTP or a backup code."""
        if is_backup_code:
            check = self.verify_backup_code(submitted_code, hashed_codes, account_id=account_id)
            return SecondFactorResult(valid=check.valid, remaining=check.remaining)

        step = self.verify_login_step(secret, submitted_code, last_used_step=last_used_step, account_id=account_id)
        return SecondFactorResult(valid=step is not None, step=step)

    def complete_login(
        self,
        pending_token: str,
        secret: str,
        hashed_codes: Sequence[str] | None,
        submitted_code: str,
        is_backup_code: bool = False,
        email: str | None = None,
        last_used_step: int | None = None,
    ) -> SecondFactorResult:
        """Second login step: check the pending token, then the code.

        The account is taken from the token subject. A bad, expired or
        mismatched token raises ``PendingTokenError`` before any code is
        looked at.
        """
        try:
            payload = verify_pending_token(pending_token, email=email)
        except PendingTokenError as e:
            log_security_event(event_type="mfa_login_failed", outcome="deny", reason_code=e.code)
            raise

        return self.verify_second_factor(
            secret,
            hashed_codes,
            submitted_code,
            is_backup_code=is_backup_code,
            last_used_step=last_used_step,
            account_id=payload["sub"],
        )

    def regenerate_backup_codes(
        self,
        secret: str,
        submitted_code: str,
        account_id: str | None = None,
    ) -> RegenerationResult:
        """Replace the whole backup-code set after a fresh TOTP check."""
        plain = self._open(secret)
        if plain is None or match_totp_step(submitted_code, plain, now=self.clock()) is None:
            log_security_event(
                event_type="mfa_failed",
                outcome="deny",
                reason_code="MFA_INVALID",
                account_id=account_id,
            )
            return RegenerationResult(success=False)

        backup_codes = generate_backup_codes(self.backup_code_count)
        hashed = [hash_backup_code(code) for code in backup_codes]
        self._commit(TwoFactorState(secret=secret, hashed_backup_codes=hashed, enabled=True))

        log_security_event(event_type="mfa_backup_codes_regenerated", outcome="allow", account_id=account_id)
        return RegenerationResult(success=True, hashed_backup_codes=hashed, backup_codes=backup_codes)

    # -- helpers ------------------------------------------------------------

    def _commit(self, state: TwoFactorState) -> None:
        if self.persist is not None:
            self.persist(state)

    def _seal(self, secret: str) -> str:
        if self.cipher is None:
            return secret
        return self.cipher.encrypt(secret)

    def _open(self, stored_secret: str) -> str | None:
        if self.cipher is None:
            return stored_secret
        try:
            return self.cipher.decrypt(stored_secret)
        except SecretDecryptionError:
            logger.warning("Stored TOTP secret failed to decrypt")
            return None
