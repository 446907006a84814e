"""User auth repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from authrepo.domain.model.user_auth import UserAuth
from authrepo.domain.value import UserAuthId


class UserAuthRepository(ABC):
    """Repository for UserAuth records."""

    @abstractmethod
    async def find_by_id(self, user_auth_id: UserAuthId) -> Optional[UserAuth]:
        """Find a user by ID.

        Args:
            user_auth_id: The user's surrogate key

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_user_name(self, user_name: str) -> Optional[UserAuth]:
        """Find a user by exact user name.

        Args:
            user_name: User name to match

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserAuth]:
        """Find a user by exact email.

        Args:
            email: Email to match

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, user: UserAuth) -> UserAuth:
        """Save a user (insert when it has no ID yet, else update).

        Args:
            user: The user to save

        Returns:
            The saved user, with its ID assigned

        Raises:
            DuplicateUserNameError: If the user name is taken
            DuplicateEmailError: If the email is taken
            NotFoundError: If updating an ID that is not stored
        """
        pass

    @abstractmethod
    async def delete(self, user_auth_id: UserAuthId) -> int:
        """Delete a user.

        Args:
            user_auth_id: The user to delete

        Returns:
            Number of records deleted
        """
        pass
