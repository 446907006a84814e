"""Repository interfaces for the auth repository domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from authrepo.domain.repository.api_key import ApiKeyRepository
from authrepo.domain.repository.store import (
    CollectionSpec,
    DocumentCollection,
    DocumentStore,
)
from authrepo.domain.repository.user_auth import UserAuthRepository
from authrepo.domain.repository.user_auth_details import UserAuthDetailsRepository

__all__ = [
    "ApiKeyRepository",
    "CollectionSpec",
    "DocumentCollection",
    "DocumentStore",
    "UserAuthDetailsRepository",
    "UserAuthRepository",
]
