"""API key repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from authrepo.domain.model.api_key import ApiKey


class ApiKeyRepository(ABC):
    """Repository for ApiKey records."""

    @abstractmethod
    async def exists(self, api_key: str) -> bool:
        """Check if a key is stored, whatever its state."""
        pass

    @abstractmethod
    async def find_by_id(self, api_key: str) -> Optional[ApiKey]:
        """Find a key.

        Args:
            api_key: The key string

        Returns:
            The key if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_uncancelled_by_user_auth_id(self, user_auth_id: str) -> list[ApiKey]:
        """Get a user's keys that have not been cancelled.

        Args:
            user_auth_id: The owning user's ID

        Returns:
            List of keys, expired ones included
        """
        pass

    @abstractmethod
    async def save(self, api_key: ApiKey) -> ApiKey:
        """Insert the key, or replace the stored key with the same ID.

        Args:
            api_key: The key to save

        Returns:
            The saved key
        """
        pass
