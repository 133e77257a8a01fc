"""Encryption of TOTP secrets at rest."""

from cryptography.fernet import Fernet, InvalidToken

from twofactor.core.config import settings
from twofactor.core.exceptions import SecretDecryptionError


class SecretCipher:
    """Fernet wrapper used for the secret handed to persistence."""

    def __init__(self, key: str | bytes):
        if isinstance(key, str):
            key = key.encode()
        self._fernet = Fernet(key)

    def encrypt(self, secret: str) -> str:
        """Encrypt TOTP secret."""
        return self._fernet.encrypt(secret.encode()).decode()

    def decrypt(self, encrypted_secret: str) -> str:
        """Decrypt TOTP secret."""
        try:
            return self._fernet.decrypt(encrypted_secret.encode()).decode()
        except (InvalidToken, AttributeError, UnicodeError) as e:
            raise SecretDecryptionError("Stored TOTP secret could not be decrypted") from e


def generate_encryption_key() -> str:
    """New Fernet key suitable for MFA_ENCRYPTION_KEY."""
    return Fernet.generate_key().decode()


def get_cipher() -> SecretCipher | None:
    """Cipher built from MFA_ENCRYPTION_KEY, or None when encryption is off."""
    if not settings.MFA_ENCRYPTION_KEY:
        return None
    return SecretCipher(settings.MFA_ENCRYPTION_KEY)

