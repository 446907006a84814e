"""Domain layer DI providers."""

from dishka import Scope, provide

from authrepo.adapter.digest import DigestAuthFunctions
from authrepo.adapter.hashing import Pbkdf2PasswordHasher
from authrepo.config import AuthSettings
from authrepo.domain.repository import (
    ApiKeyRepository,
    UserAuthDetailsRepository,
    UserAuthRepository,
)
from authrepo.domain.service import (
    ApiKeyService,
    CredentialService,
    DigestAuth,
    PasswordHasher,
    SessionReconciler,
    UniquenessGuard,
)
from authrepo.util.di.base import ProviderBase
from authrepo.util.locks import KeyedLock


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are APP-scoped: they hold no per-call state and share
    one set of write locks.
    """

    scope = Scope.APP

    @provide
    def get_locks(self) -> KeyedLock:
        """Provide the shared write locks."""
        return KeyedLock()

    @provide
    def get_password_hasher(self, auth_settings: AuthSettings) -> PasswordHasher:
        """Provide PBKDF2 password hasher."""
        return Pbkdf2PasswordHasher(iterations=auth_settings.hash_iterations)

    @provide
    def get_digest_auth(self) -> DigestAuth:
        """Provide digest authentication functions."""
        return DigestAuthFunctions()

    @provide
    def get_uniqueness_guard(
        self, user_auth_repository: UserAuthRepository
    ) -> UniquenessGuard:
        """Provide uniqueness guard."""
        return UniquenessGuard(user_auth_repository=user_auth_repository)

    @provide
    def get_credential_service(
        self,
        user_auth_repository: UserAuthRepository,
        uniqueness_guard: UniquenessGuard,
        password_hasher: PasswordHasher,
        digest_auth: DigestAuth,
        auth_settings: AuthSettings,
        locks: KeyedLock,
    ) -> CredentialService:
        """Provide credential domain service."""
        return CredentialService(
            user_auth_repository=user_auth_repository,
            uniqueness_guard=uniqueness_guard,
            password_hasher=password_hasher,
            digest_auth=digest_auth,
            auth_settings=auth_settings,
            locks=locks,
        )

    @provide
    def get_session_reconciler(
        self,
        user_auth_repository: UserAuthRepository,
        user_auth_details_repository: UserAuthDetailsRepository,
        uniqueness_guard: UniquenessGuard,
        locks: KeyedLock,
    ) -> SessionReconciler:
        """Provide session reconciler domain service."""
        return SessionReconciler(
            user_auth_repository=user_auth_repository,
            user_auth_details_repository=user_auth_details_repository,
            uniqueness_guard=uniqueness_guard,
            locks=locks,
        )

    @provide
    def get_api_key_service(self, api_key_repository: ApiKeyRepository) -> ApiKeyService:
        """Provide API key domain service."""
        return ApiKeyService(api_key_repository=api_key_repository)
