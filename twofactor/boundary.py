"""Validate raw request bodies and route them to the two-factor service."""

from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from twofactor.core.exceptions import InvalidRequestError
from twofactor.mfa.service import TwoFactorService
from twofactor.schemas.mfa import (
    ActivateRequest,
    DisableRequest,
    EnrollRequest,
    LoginCodeRequest,
    RegenerateRequest,
    TwoFactorRequest,
)

_request_adapter: TypeAdapter[TwoFactorRequest] = TypeAdapter(TwoFactorRequest)


def parse_request(data: Any) -> BaseModel:
    """Validate ``data`` into one of the tagged request models."""
    try:
        return _request_adapter.validate_python(data)
    except ValidationError as e:
        details = [
            {
                "field": ".".join(str(loc) for loc in error.get("loc", [])),
                "issue": error.get("msg", "Validation error"),
                "type": error.get("type", "validation_error"),
            }
            for error in e.errors()
        ]
        raise InvalidRequestError("Invalid request data", details=details) from e


def dispatch(service: TwoFactorService, data: Any, account_id: str | None = None) -> BaseModel:
    """Parse ``data`` and run the matching service operation."""
    request = parse_request(data)

    if isinstance(request, EnrollRequest):
        return service.initiate_enrollment(request.account_label, account_id=account_id, issuer=request.issuer)
    if isinstance(request, ActivateRequest):
        return service.verify_and_activate(request.secret, request.backup_codes, request.code, account_id=account_id)
    if isinstance(request, LoginCodeRequest):
        if request.pending_token is not None:
            return service.complete_login(
                request.pending_token,
                request.secret,
                request.hashed_backup_codes,
                request.code,
                is_backup_code=request.is_backup_code,
                email=request.email,
                last_used_step=request.last_used_step,
            )
        return service.verify_second_factor(
            request.secret,
            request.hashed_backup_codes,
            request.code,
            is_backup_code=request.is_backup_code,
            last_used_step=request.last_used_step,
            account_id=account_id,
        )
    if isinstance(request, RegenerateRequest):
        return service.regenerate_backup_codes(request.secret, request.code, account_id=account_id)
    if isinstance(request, DisableRequest):
        return service.disable(account_id=account_id)
    raise InvalidRequestError(f"Unsupported request kind: {type(request).__name__}")
