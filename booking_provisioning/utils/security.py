# booking_provisioning/utils/security.py
import hashlib
import logging
import secrets
from typing import Optional, Tuple
from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


def generate_fernet_key() -> str:
    """New urlsafe base64 Fernet key, suitable for ENCRYPTION_KEY."""
    return Fernet.generate_key().decode("ascii")


def hash_token(token: str) -> str:
    """
    SHA-256 hex digest of a token.

    Only the hash is persisted; the raw token leaves the process exactly once.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_token_and_hash(nbytes: int = 32) -> Tuple[str, str]:
    """
    Returns:
        Tuple of the raw URL-safe token (for the recipient) and its hash (for storage)
    """
    token = secrets.token_urlsafe(nbytes)
    return token, hash_token(token)


class FernetEncryptor:
    """
    Symmetric encryption for tenant routing secrets.

    A missing or malformed key leaves the encryptor disabled: `key_valid` is
    False and `encrypt`/`decrypt` return None instead of raising.
    """

    def __init__(self, encryption_key: Optional[str]):
        self._fernet: Optional[Fernet] = None
        if not encryption_key:
            logger.warning("ENCRYPTION_KEY is not set. Routing secrets will not be stored.")
            return
        try:
            self._fernet = Fernet(encryption_key.encode("ascii"))
        except (ValueError, TypeError) as e:
            # Fernet rejects anything that is not 32 urlsafe-base64 bytes
            logger.error(f"ENCRYPTION_KEY rejected, routing secrets will not be stored: {e}")
            return
        logger.info("Routing secret encryption enabled.")

    @property
    def key_valid(self) -> bool:
        return self._fernet is not None

    def encrypt(self, plaintext: str) -> Optional[str]:
        if self._fernet is None:
            logger.error("Cannot encrypt routing secret: no valid encryption key.")
            return None
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> Optional[str]:
        if self._fernet is None:
            logger.error("Cannot decrypt routing secret: no valid encryption key.")
            return None
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken:
            logger.error("Routing secret decryption failed: wrong key or corrupted ciphertext.")
            return None
