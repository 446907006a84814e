"""Mock persistence providers for testing."""

from dishka import Scope, provide

from authrepo.domain.repository import DocumentStore
from authrepo.persistence.store import InMemoryDocumentStore
from authrepo.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using the in-memory document store.

    Each container gets a fresh store, so tests building their own container
    are isolated.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_document_store(self) -> DocumentStore:
        """Provide in-memory document store."""
        return InMemoryDocumentStore()
