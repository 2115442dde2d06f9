"""
Symmetric encryption for credentials stored at rest.
Uses Fernet (AES-128-CBC + HMAC-SHA256) with a server-held key.
"""

import base64
import hashlib
import logging

from cryptography.fernet import Fernet, InvalidToken

from .config import CREDENTIALS_ENCRYPTION_KEY, SECRET_KEY

logger = logging.getLogger(__name__)


def _build_fernet() -> Fernet:
    if CREDENTIALS_ENCRYPTION_KEY:
        return Fernet(CREDENTIALS_ENCRYPTION_KEY.encode())
    logger.warning("⚠️ CREDENTIALS_ENCRYPTION_KEY not set, deriving credential key from SECRET_KEY")
    derived = base64.urlsafe_b64encode(hashlib.sha256(SECRET_KEY.encode()).digest())
    return Fernet(derived)


fernet = _build_fernet()


class SecretDecryptionError(Exception):
    """Stored ciphertext could not be decrypted with the current key"""


def encrypt_secret(plaintext: str) -> str:
    """Encrypt a credential for storage"""
    return fernet.encrypt(plaintext.encode()).decode()


def decrypt_secret(token: str) -> str:
    """Decrypt a stored credential"""
    try:
        return fernet.decrypt(token.encode()).decode()
    except InvalidToken as e:
        logger.error("❌ Failed to decrypt stored credential - key rotated or data corrupted")
        raise SecretDecryptionError("Stored credential could not be decrypted") from e
