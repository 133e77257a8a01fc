"""Backup code generation, hashing and one-time consumption.

Codes look like ``1A2B-3C4D``: four random bytes rendered as upper-case hex
and split in two groups. Only the SHA-256 hex digest of the normalized code is
ever persisted, so ``ab12cd34``, ``AB12-CD34`` and ``ab12 cd34`` all verify
against the same stored hash.

Consumption is a pure function over the stored sequence. The caller persists
the returned ``remaining`` list; two concurrent consumers reading the same
list must be serialized by the caller's storage layer.
"""

import hashlib
import re
import secrets
from collections.abc import Sequence

from twofactor.core.config import settings
from twofactor.core.exceptions import EntropyUnavailableError
from twofactor.core.logging import get_logger
from twofactor.schemas.mfa import BackupCodeCheck

logger = get_logger(__name__)

BACKUP_CODE_BYTES = 4
GROUP_SIZE = 4

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def generate_backup_codes(count: int | None = None) -> list[str]:
    """Generate ``count`` independent backup codes. Duplicates are not filtered."""
    if count is None:
        count = settings.MFA_BACKUP_CODES_COUNT
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValueError("count must be a positive integer")

    codes = []
    for _ in range(count):
        try:
            raw = secrets.token_hex(BACKUP_CODE_BYTES).upper()
        except (OSError, NotImplementedError) as e:
            raise EntropyUnavailableError("System randomness source unavailable") from e
        codes.append(f"{raw[:GROUP_SIZE]}-{raw[GROUP_SIZE:]}")
    return codes


def normalize_backup_code(code: str) -> str:
    """Strip separators, upper-case, and restore the ``XXXX-XXXX`` grouping."""
    cleaned = _NON_ALNUM.sub("", code).upper()
    return f"{cleaned[:GROUP_SIZE]}-{cleaned[GROUP_SIZE:]}"


def hash_backup_code(code: str) -> str:
    """Hash a backup code for storage (64 hex chars)."""
    return hashlib.sha256(normalize_backup_code(code).encode("utf-8")).hexdigest()


def verify_and_consume(code: str, hashed_codes: Sequence[str] | None) -> BackupCodeCheck:
    """Check ``code`` against ``hashed_codes`` and drop the first match.

    ``hashed_codes`` is never mutated. On a miss (or malformed input) the
    original sequence comes back unchanged with ``valid=False``. ``None``
    (2FA disabled) is an empty set. Non-string entries can never match and
    are dropped from ``remaining``.
    """
    stored = [h for h in hashed_codes or [] if isinstance(h, str)]
    try:
        candidate = hash_backup_code(code)
    except (TypeError, AttributeError):
        logger.warning("Backup code verification rejected malformed input")
        return BackupCodeCheck(valid=False, remaining=stored)

    candidate_bytes = candidate.encode("ascii")
    for index, stored_hash in enumerate(stored):
        if secrets.compare_digest(candidate_bytes, stored_hash.encode("utf-8")):
            return BackupCodeCheck(valid=True, remaining=stored[:index] + stored[index + 1 :])

    return BackupCodeCheck(valid=False, remaining=stored)
