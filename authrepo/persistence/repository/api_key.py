"""ApiKey repository implementation on a document store."""

from typing import Optional

from authrepo.domain.error import DuplicateKeyError
from authrepo.domain.model.api_key import ApiKey
from authrepo.domain.repository import ApiKeyRepository, DocumentStore
from authrepo.persistence.collections import API_KEY


class DocumentApiKeyRepository(ApiKeyRepository):
    """Document store implementation of ApiKeyRepository."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize repository with a document store.

        Args:
            store: Document store holding the api_key collection
        """
        self.collection = store.collection(API_KEY)

    async def exists(self, api_key: str) -> bool:
        return await self.collection.count(id=api_key) > 0

    async def find_by_id(self, api_key: str) -> Optional[ApiKey]:
        return await self.collection.find_by_key(api_key)

    async def find_uncancelled_by_user_auth_id(self, user_auth_id: str) -> list[ApiKey]:
        keys = await self.collection.find(user_auth_id=user_auth_id, cancelled_date=None)
        return sorted(keys, key=lambda key: key.created_date)

    async def save(self, api_key: ApiKey) -> ApiKey:
        """Insert or replace a key.

        A concurrent writer may insert the same new key between the lookup
        and the insert; the write then falls back to an update.

        Args:
            api_key: ApiKey to store

        Returns:
            Stored ApiKey
        """
        if await self.collection.find_by_key(api_key.id) is None:
            try:
                return await self.collection.insert(api_key)
            except DuplicateKeyError as e:
                if e.fields != (API_KEY.key,):
                    raise

        await self.collection.update(api_key)
        return api_key
