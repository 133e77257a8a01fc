"""TOTP secrets, backup codes, provisioning and the enrollment lifecycle."""

from twofactor.mfa.backup_codes import (
    generate_backup_codes,
    hash_backup_code,
    normalize_backup_code,
    verify_and_consume,
)
from twofactor.mfa.pending_token import create_pending_token, verify_pending_token
from twofactor.mfa.provisioning import build_provisioning
from twofactor.mfa.secret import generate_totp_secret
from twofactor.mfa.service import TwoFactorService
from twofactor.mfa.totp import generate_totp_code, match_totp_step, verify_totp_code

__all__ = [
    "generate_backup_codes",
    "hash_backup_code",
    "normalize_backup_code",
    "verify_and_consume",
    "create_pending_token",
    "verify_pending_token",
    "build_provisioning",
    "generate_totp_secret",
    "TwoFactorService",
    "generate_totp_code",
    "match_totp_step",
    "verify_totp_code",
]
