"""Application layer DI providers."""

from dishka import Scope, provide

from authrepo.application.auth_repository import AuthRepository
from authrepo.config import AuthSettings
from authrepo.domain.repository import DocumentStore
from authrepo.domain.service import (
    ApiKeyService,
    CredentialService,
    SessionReconciler,
    UniquenessGuard,
)
from authrepo.persistence.schema import AuthSchema
from authrepo.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application provider - concrete, no mocks needed."""

    @provide(scope=Scope.APP)
    def get_auth_schema(self, store: DocumentStore) -> AuthSchema:
        """Provide collection schema manager."""
        return AuthSchema(store)

    @provide(scope=Scope.APP)
    async def get_auth_repository(
        self,
        schema: AuthSchema,
        auth_settings: AuthSettings,
        uniqueness_guard: UniquenessGuard,
        credential_service: CredentialService,
        session_reconciler: SessionReconciler,
        api_key_service: ApiKeyService,
    ) -> AuthRepository:
        """Provide auth repository with its collections prepared."""
        repository = AuthRepository(
            schema=schema,
            auth_settings=auth_settings,
            uniqueness_guard=uniqueness_guard,
            credential_service=credential_service,
            session_reconciler=session_reconciler,
            api_key_service=api_key_service,
        )
        await repository.initialize()
        return repository
