"""API key domain service."""

from collections.abc import Iterable

import logfire

from authrepo.domain.model.api_key import ApiKey
from authrepo.domain.model.common import utcnow
from authrepo.domain.repository import ApiKeyRepository

from .base import Service


class ApiKeyService(Service):
    """Domain service for API key storage and lookup."""

    def __init__(self, api_key_repository: ApiKeyRepository) -> None:
        """Initialize API key service.

        Args:
            api_key_repository: API key repository
        """
        self.api_key_repository = api_key_repository

    async def api_key_exists(self, api_key: str | None) -> bool:
        """Check whether a key is stored; empty keys never are."""
        if not api_key:
            return False
        return await self.api_key_repository.exists(api_key)

    async def get_api_key(self, api_key: str | None) -> ApiKey | None:
        """Get a key record by the key itself."""
        if not api_key:
            return None
        return await self.api_key_repository.find_by_id(api_key)

    async def get_user_api_keys(self, user_auth_id: str | int) -> list[ApiKey]:
        """Get the keys of a user that are usable right now.

        Cancelled keys and keys past their expiry are left out.

        Args:
            user_auth_id: Owning user's id

        Returns:
            Active keys, oldest first
        """
        now = utcnow()
        keys = await self.api_key_repository.find_uncancelled_by_user_auth_id(str(user_auth_id))
        return [key for key in keys if key.is_active(now)]

    async def store_all(self, api_keys: Iterable[ApiKey]) -> list[ApiKey]:
        """Insert or replace every given key.

        Args:
            api_keys: Keys to store

        Returns:
            Stored keys
        """
        stored = [await self.api_key_repository.save(key) for key in api_keys]
        # Never log the keys themselves
        logfire.info(
            "API keys stored",
            count=len(stored),
            user_auth_ids=sorted({key.user_auth_id for key in stored}),
        )
        return stored
