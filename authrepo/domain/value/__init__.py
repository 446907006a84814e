"""Domain value objects for the auth repository."""

from authrepo.domain.value.identifiers import (
    ApiKeyId,
    UserAuthDetailsId,
    UserAuthId,
    parse_user_auth_id,
)
from authrepo.domain.value.types import AuthSession, AuthTokens

__all__ = [
    # Identifiers
    "ApiKeyId",
    "UserAuthDetailsId",
    "UserAuthId",
    "parse_user_auth_id",
    # Types
    "AuthSession",
    "AuthTokens",
]
