"""External login link repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from authrepo.domain.model.user_auth_details import UserAuthDetails
from authrepo.domain.value import UserAuthId


class UserAuthDetailsRepository(ABC):
    """Repository for UserAuthDetails records.

    Manages the links between users and their external provider accounts.
    """

    @abstractmethod
    async def find_by_provider(
        self, provider: str, user_id: str
    ) -> Optional[UserAuthDetails]:
        """Find a link by provider and provider user ID.

        Args:
            provider: The provider name
            user_id: The user's ID on that provider

        Returns:
            The link if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_user_auth_id(
        self, user_auth_id: UserAuthId
    ) -> list[UserAuthDetails]:
        """Get all links owned by a user.

        Args:
            user_auth_id: The owning user's ID

        Returns:
            List of links (may be empty)
        """
        pass

    @abstractmethod
    async def save(self, details: UserAuthDetails) -> UserAuthDetails:
        """Save a link (insert when it has no ID yet, else update).

        Args:
            details: The link to save

        Returns:
            The saved link, with its ID assigned

        Raises:
            DuplicateKeyError: If the provider identity is already linked
        """
        pass

    @abstractmethod
    async def delete_all_by_user_auth_id(self, user_auth_id: UserAuthId) -> int:
        """Delete every link owned by a user.

        Args:
            user_auth_id: The owning user's ID

        Returns:
            Number of links deleted
        """
        pass
