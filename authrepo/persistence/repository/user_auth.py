"""UserAuth repository implementation on a document store."""

from typing import Optional

from authrepo.domain.error import (
    DuplicateEmailError,
    DuplicateKeyError,
    DuplicateUserNameError,
    NotFoundError,
)
from authrepo.domain.model.user_auth import UserAuth
from authrepo.domain.repository import DocumentStore, UserAuthRepository
from authrepo.domain.value import UserAuthId
from authrepo.persistence.collections import USER_AUTH


class DocumentUserAuthRepository(UserAuthRepository):
    """Document store implementation of UserAuthRepository."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize repository with a document store.

        Args:
            store: Document store holding the user_auth collection
        """
        self.collection = store.collection(USER_AUTH)

    async def find_by_id(self, user_auth_id: UserAuthId) -> Optional[UserAuth]:
        return await self.collection.find_by_key(user_auth_id)

    async def find_by_user_name(self, user_name: str) -> Optional[UserAuth]:
        return await self.collection.find_one(user_name=user_name)

    async def find_by_email(self, email: str) -> Optional[UserAuth]:
        return await self.collection.find_one(email=email)

    async def save(self, user: UserAuth) -> UserAuth:
        """Save user, mapping unique index violations to domain errors.

        Args:
            user: UserAuth to save

        Returns:
            Saved UserAuth with its ID
        """
        try:
            if user.id is None:
                return await self.collection.insert(user)

            if not await self.collection.update(user):
                raise NotFoundError("UserAuth", str(user.id))
            return user
        except DuplicateKeyError as e:
            if e.fields == ("user_name",) and user.user_name is not None:
                raise DuplicateUserNameError(user.user_name) from e
            if e.fields == ("email",) and user.email is not None:
                raise DuplicateEmailError(user.email) from e
            raise

    async def delete(self, user_auth_id: UserAuthId) -> int:
        return await self.collection.delete(id=user_auth_id)
