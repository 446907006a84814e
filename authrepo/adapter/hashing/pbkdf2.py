"""PBKDF2 password hashing."""

import hashlib
import hmac
import secrets
from base64 import b64decode, b64encode
from binascii import Error as Base64Error

from authrepo.domain.service import PasswordHasher


class Pbkdf2PasswordHasher(PasswordHasher):
    """Salted PBKDF2-HMAC-SHA256 password hasher.

    Hash and salt are stored base64-encoded. A stored hash only verifies
    with the iteration count it was created with.
    """

    ALGORITHM = "sha256"

    def __init__(self, iterations: int, salt_bytes: int = 16) -> None:
        """Initialize hasher.

        Args:
            iterations: PBKDF2 iteration count
            salt_bytes: Length of generated salts in bytes
        """
        self.iterations = iterations
        self.salt_bytes = salt_bytes

    def hash(self, password: str) -> tuple[str, str]:
        salt = secrets.token_bytes(self.salt_bytes)
        derived = self._derive(password, salt)
        return b64encode(derived).decode("ascii"), b64encode(salt).decode("ascii")

    def verify(self, password: str, password_hash: str, salt: str) -> bool:
        try:
            expected = b64decode(password_hash, validate=True)
            salt_raw = b64decode(salt, validate=True)
        except (Base64Error, ValueError):
            # Corrupt stored credentials never verify
            return False

        return hmac.compare_digest(self._derive(password, salt_raw), expected)

    def _derive(self, password: str, salt: bytes) -> bytes:
        return hashlib.pbkdf2_hmac(self.ALGORITHM, password.encode("utf-8"), salt, self.iterations)
