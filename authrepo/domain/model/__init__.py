"""Domain records for the auth repository."""

from authrepo.domain.model.api_key import ApiKey
from authrepo.domain.model.user_auth import UserAuth
from authrepo.domain.model.user_auth_details import UserAuthDetails

__all__ = [
    "ApiKey",
    "UserAuth",
    "UserAuthDetails",
]
