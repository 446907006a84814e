"""UserAuthDetails repository implementation on a document store."""

from typing import Optional

from authrepo.domain.error import NotFoundError
from authrepo.domain.model.user_auth_details import UserAuthDetails
from authrepo.domain.repository import DocumentStore, UserAuthDetailsRepository
from authrepo.domain.value import UserAuthId
from authrepo.persistence.collections import USER_AUTH_DETAILS


class DocumentUserAuthDetailsRepository(UserAuthDetailsRepository):
    """Document store implementation of UserAuthDetailsRepository."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize repository with a document store.

        Args:
            store: Document store holding the user_auth_details collection
        """
        self.collection = store.collection(USER_AUTH_DETAILS)

    async def find_by_provider(
        self, provider: str, user_id: str
    ) -> Optional[UserAuthDetails]:
        return await self.collection.find_one(provider=provider, user_id=user_id)

    async def find_all_by_user_auth_id(
        self, user_auth_id: UserAuthId
    ) -> list[UserAuthDetails]:
        links = await self.collection.find(user_auth_id=user_auth_id)
        # Oldest link first
        return sorted(links, key=lambda link: link.id or 0)

    async def save(self, details: UserAuthDetails) -> UserAuthDetails:
        """Save link, inserting it the first time it is seen.

        Args:
            details: UserAuthDetails to save

        Returns:
            Saved UserAuthDetails with its ID
        """
        if details.id is None:
            return await self.collection.insert(details)

        if not await self.collection.update(details):
            raise NotFoundError("UserAuthDetails", str(details.id))
        return details

    async def delete_all_by_user_auth_id(self, user_auth_id: UserAuthId) -> int:
        return await self.collection.delete(user_auth_id=user_auth_id)
