"""User name and email uniqueness checks."""

import logfire

from authrepo.domain.error import DuplicateEmailError, DuplicateUserNameError
from authrepo.domain.model.user_auth import UserAuth
from authrepo.domain.repository import UserAuthRepository

from .base import Service


class UniquenessGuard(Service):
    """Keeps user names and emails unique across UserAuth records.

    The check runs before writes to give callers a precise error. The unique
    indexes of the store remain the final arbiter when two writers race.
    """

    def __init__(self, user_auth_repository: UserAuthRepository) -> None:
        """Initialize uniqueness guard.

        Args:
            user_auth_repository: User auth repository
        """
        self.user_auth_repository = user_auth_repository

    async def find_by_name_or_email(self, user_name_or_email: str | None) -> UserAuth | None:
        """Find a user by user name or email.

        A value containing "@" is matched against emails only, anything else
        against user names only. A user name containing "@" can therefore not
        be found this way.

        Args:
            user_name_or_email: User name or email

        Returns:
            User if found, None otherwise
        """
        if user_name_or_email is None:
            return None

        if "@" in user_name_or_email:
            return await self.user_auth_repository.find_by_email(user_name_or_email)
        return await self.user_auth_repository.find_by_user_name(user_name_or_email)

    async def assert_no_conflict(
        self, candidate: UserAuth, except_existing: UserAuth | None = None
    ) -> None:
        """Fail if another user already owns the candidate's user name or email.

        Args:
            candidate: User about to be created or updated
            except_existing: Stored version of the user being updated, so a
                user never conflicts with itself

        Raises:
            DuplicateUserNameError: If the user name belongs to another user
            DuplicateEmailError: If the email belongs to another user
        """
        except_id = except_existing.id if except_existing is not None else None

        if candidate.user_name is not None:
            existing = await self.find_by_name_or_email(candidate.user_name)
            if existing is not None and (except_id is None or existing.id != except_id):
                logfire.warn("User name already taken", existing_user_auth_id=existing.id)
                raise DuplicateUserNameError(candidate.user_name)

        if candidate.email is not None:
            existing = await self.find_by_name_or_email(candidate.email)
            if existing is not None and (except_id is None or existing.id != except_id):
                logfire.warn("Email already taken", existing_user_auth_id=existing.id)
                raise DuplicateEmailError(candidate.email)
