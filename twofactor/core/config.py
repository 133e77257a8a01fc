"""Two-factor settings and configuration."""

from typing import Literal

from pydantic import Field, field_validator  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore

# pyotp refuses secrets shorter than 160 bits (32 base32 characters)
MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Two-factor settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENV: Literal["dev", "staging", "prod", "test"] = Field(default="dev")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # TOTP
    MFA_TOTP_ISSUER: str = Field(default="Aithor")
    MFA_TOTP_PERIOD: int = Field(default=30)
    MFA_TOTP_DIGITS: int = Field(default=6)
    MFA_TOTP_VALID_WINDOW: int = Field(default=1)  # steps accepted either side of now
    MFA_SECRET_LENGTH: int = Field(default=32)  # base32 chars, 32 = 160 bits

    # Backup codes
    MFA_BACKUP_CODES_COUNT: int = Field(default=10)

    # Secret at rest
    MFA_ENCRYPTION_KEY: str | None = Field(default=None)  # Fernet key for encrypting TOTP secrets

    # Pending second-factor token
    MFA_TOKEN_SECRET: str | None = Field(default=None)
    MFA_TOKEN_ALG: str = Field(default="HS256")
    MFA_TOKEN_EXPIRE_MINUTES: int = Field(default=5)

    @field_validator("MFA_SECRET_LENGTH")
    @classmethod
    def check_secret_length(cls, value: int) -> int:
        """Reject secrets shorter than 160 bits."""
        if value < MIN_SECRET_LENGTH:
            raise ValueError(f"MFA_SECRET_LENGTH must be at least {MIN_SECRET_LENGTH}")
        return value

    @field_validator("MFA_BACKUP_CODES_COUNT", "MFA_TOTP_PERIOD", "MFA_TOKEN_EXPIRE_MINUTES")
    @classmethod
    def check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    def __init__(self, **kwargs):
        """Validate settings on initialization."""
        super().__init__(**kwargs)
        # Fail fast in production if critical vars are missing
        if self.ENV == "prod":
            if not self.MFA_ENCRYPTION_KEY:
                raise ValueError("MFA_ENCRYPTION_KEY must be set in production")
            if not self.MFA_TOKEN_SECRET:
                raise ValueError("MFA_TOKEN_SECRET must be set in production")


# Global settings instance
settings = Settings()
