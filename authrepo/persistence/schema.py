"""Collection and index management for the auth repository."""

import logfire

from authrepo.domain.repository import CollectionSpec, DocumentStore
from authrepo.persistence.collections import API_KEY, INDEXES, USER_AUTH, USER_AUTH_DETAILS


class AuthSchema:
    """Creates, checks and resets the collections the repository needs."""

    REQUIRED: tuple[CollectionSpec, ...] = (USER_AUTH, USER_AUTH_DETAILS, API_KEY)

    def __init__(self, store: DocumentStore) -> None:
        """Initialize schema manager.

        Args:
            store: Document store holding the collections
        """
        self.store = store

    async def missing_collections(self) -> list[str]:
        """Names of required collections that do not exist."""
        existing = set(await self.store.list_collection_names())
        return [spec.name for spec in self.REQUIRED if spec.name not in existing]

    async def collections_exist(self) -> bool:
        """Check that every required collection exists."""
        return not await self.missing_collections()

    async def create_missing_collections(self) -> list[str]:
        """Create missing collections and make sure every index exists.

        Indexes are ensured on existing collections too, so stores created
        before an index was introduced still get their unique constraints.

        Returns:
            Names of the collections that were created
        """
        with logfire.span("auth_schema.create_missing_collections"):
            missing = await self.missing_collections()
            for spec in self.REQUIRED:
                await self._ensure_indexes(spec)
            if missing:
                logfire.info("Collections created", collections=missing)
            return missing

    async def init_api_key_schema(self) -> None:
        """Create the API key collection and its index if missing."""
        await self._ensure_indexes(API_KEY)

    async def drop_and_recreate(self) -> None:
        """Drop every collection with its data, then recreate them empty."""
        with logfire.span("auth_schema.drop_and_recreate"):
            for spec in self.REQUIRED:
                await self.store.drop_collection(spec.name)
            await self.create_missing_collections()

    async def _ensure_indexes(self, spec: CollectionSpec) -> None:
        collection = self.store.collection(spec)
        for fields, unique in INDEXES[spec.name]:
            await collection.ensure_index(*fields, unique=unique)
