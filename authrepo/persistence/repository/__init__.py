"""Document store repository implementations."""

from authrepo.persistence.repository.api_key import DocumentApiKeyRepository
from authrepo.persistence.repository.user_auth import DocumentUserAuthRepository
from authrepo.persistence.repository.user_auth_details import (
    DocumentUserAuthDetailsRepository,
)

__all__ = [
    "DocumentApiKeyRepository",
    "DocumentUserAuthDetailsRepository",
    "DocumentUserAuthRepository",
]
