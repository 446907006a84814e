"""Password hashing adapters."""

from .pbkdf2 import Pbkdf2PasswordHasher

__all__ = ["Pbkdf2PasswordHasher"]
