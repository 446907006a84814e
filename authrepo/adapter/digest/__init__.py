"""HTTP digest authentication adapter."""

from .functions import DigestAuthFunctions

__all__ = ["DigestAuthFunctions"]
