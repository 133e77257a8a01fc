"""Two-factor authentication core: TOTP enrollment, backup codes, 2FA lifecycle."""

__version__ = "0.1.0"
