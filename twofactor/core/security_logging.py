"""Security event logging utilities."""

from typing import Any

from twofactor.core.logging import get_logger

logger = get_logger(__name__)


def log_security_event(
    event_type: str,
    outcome: str,  # "allow", "deny"
    reason_code: str | None = None,
    account_id: str | None = None,
    **extra_fields: Any,
) -> None:
    """
    Log a security event with structured fields.

    Never pass secrets, cleartext backup codes or submitted codes here; the
    record is meant for audit sinks that are less protected than the account
    store.

    Args:
        event_type: Event type (e.g., "mfa_enabled", "mfa_login_failed")
        outcome: "allow" or "deny"
        reason_code: Error code if outcome is "deny"
        account_id: Opaque account identifier if known
        **extra_fields: Additional fields to include
    """
    log_data: dict[str, Any] = {
        "event_type": event_type,
        "outcome": outcome,
    }

    if account_id:
        log_data["account_id"] = account_id
    if reason_code:
        log_data["reason_code"] = reason_code

    log_data.update(extra_fields)

    if outcome == "deny":
        logger.warning("Security event: denied", extra=log_data)
    else:
        logger.info("Security event: allowed", extra=log_data)
