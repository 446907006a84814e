"""Domain services."""

from .api_key_service import ApiKeyService
from .base import Service
from .credential_service import (
    CredentialService,
    DigestAuth,
    PasswordHasher,
    validate_new_user,
)
from .session_reconciler import SessionReconciler
from .uniqueness_guard import UniquenessGuard

__all__ = [
    "ApiKeyService",
    "CredentialService",
    "DigestAuth",
    "PasswordHasher",
    "Service",
    "SessionReconciler",
    "UniquenessGuard",
    "validate_new_user",
]
