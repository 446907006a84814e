"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from authrepo.config import Settings
from authrepo.domain.repository import (
    ApiKeyRepository,
    DocumentStore,
    UserAuthDetailsRepository,
    UserAuthRepository,
)
from authrepo.persistence.database import create_engine
from authrepo.persistence.repository import (
    DocumentApiKeyRepository,
    DocumentUserAuthDetailsRepository,
    DocumentUserAuthRepository,
)
from authrepo.persistence.store import SqlDocumentStore
from authrepo.util.di.base import ProviderBase
from authrepo.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using the SQL document store."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the container closes."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()
        logfire.info("Database engine disposed")

    @provide(scope=Scope.APP)
    def get_document_store(self, engine: AsyncEngine) -> DocumentStore:
        """Provide document store."""
        return SqlDocumentStore(engine)


class RepositoryProvider(ProviderBase):
    """Repositories on whichever document store is provided - concrete."""

    scope = Scope.APP

    @provide
    def get_user_auth_repository(self, store: DocumentStore) -> UserAuthRepository:
        """Provide UserAuth repository."""
        return DocumentUserAuthRepository(store)

    @provide
    def get_user_auth_details_repository(
        self, store: DocumentStore
    ) -> UserAuthDetailsRepository:
        """Provide UserAuthDetails repository."""
        return DocumentUserAuthDetailsRepository(store)

    @provide
    def get_api_key_repository(self, store: DocumentStore) -> ApiKeyRepository:
        """Provide ApiKey repository."""
        return DocumentApiKeyRepository(store)
