"""Session reconciler domain service.

Resolves the user behind an authenticated session and merges external
provider logins into stored users and login links.
"""

import logfire

from authrepo.domain.error import NotFoundError, ValidationError
from authrepo.domain.model.common import utcnow
from authrepo.domain.model.populate import (
    populate_missing_link,
    populate_missing_user,
    populate_session,
    user_from_session,
)
from authrepo.domain.model.user_auth import UserAuth
from authrepo.domain.model.user_auth_details import UserAuthDetails
from authrepo.domain.repository import UserAuthDetailsRepository, UserAuthRepository
from authrepo.domain.value import AuthSession, AuthTokens, parse_user_auth_id
from authrepo.util.locks import (
    KeyedLock,
    email_key,
    provider_key,
    user_auth_key,
    user_name_key,
)

from .base import Service
from .uniqueness_guard import UniquenessGuard


class SessionReconciler(Service):
    """Domain service linking sessions, provider logins and users."""

    def __init__(
        self,
        user_auth_repository: UserAuthRepository,
        user_auth_details_repository: UserAuthDetailsRepository,
        uniqueness_guard: UniquenessGuard,
        locks: KeyedLock,
    ) -> None:
        """Initialize session reconciler.

        Args:
            user_auth_repository: User auth repository
            user_auth_details_repository: Login link repository
            uniqueness_guard: User name/email uniqueness guard
            locks: Write locks shared with the other services
        """
        self.user_auth_repository = user_auth_repository
        self.user_auth_details_repository = user_auth_details_repository
        self.uniqueness_guard = uniqueness_guard
        self.locks = locks

    async def get_user_auth(self, user_auth_id: str | int | None) -> UserAuth | None:
        """Get a user by id; ids that are not integers match nothing."""
        parsed = parse_user_auth_id(user_auth_id)
        if parsed is None:
            return None
        return await self.user_auth_repository.find_by_id(parsed)

    async def get_user_auth_details(self, user_auth_id: str | int | None) -> list[UserAuthDetails]:
        """Get every login link of a user, oldest first."""
        parsed = parse_user_auth_id(user_auth_id)
        if parsed is None:
            return []
        return await self.user_auth_details_repository.find_all_by_user_auth_id(parsed)

    async def get_user_auth_for_session(
        self, session: AuthSession, tokens: AuthTokens | None = None
    ) -> UserAuth | None:
        """Resolve the user a session belongs to.

        Resolution order: the session's user id, then its user name (or
        email), then the owner of the login link matching the tokens'
        provider identity.

        Args:
            session: Authenticated session
            tokens: Provider tokens of the current login, if any

        Returns:
            User if resolved, None otherwise
        """
        if session.user_auth_id:
            user = await self.get_user_auth(session.user_auth_id)
            if user is not None:
                return user

        if session.user_auth_name:
            user = await self.uniqueness_guard.find_by_name_or_email(session.user_auth_name)
            if user is not None:
                return user

        if tokens is None or not tokens.provider or not tokens.user_id:
            return None

        link = await self.user_auth_details_repository.find_by_provider(
            tokens.provider, tokens.user_id
        )
        if link is None or link.user_auth_id is None:
            return None
        return await self.user_auth_repository.find_by_id(link.user_auth_id)

    async def create_or_merge_auth_session(
        self, session: AuthSession, tokens: AuthTokens
    ) -> UserAuthDetails:
        """Merge a provider login into the session's user and its login link.

        Missing user and link fields are filled from the provider data; set
        fields are never overwritten. Calling this twice with the same tokens
        leaves a single link.

        Args:
            session: Authenticated session
            tokens: Provider tokens with provider and user_id set

        Returns:
            The stored login link

        Raises:
            ValidationError: If tokens lack provider or user_id
        """
        if not tokens.provider or not tokens.user_id:
            raise ValidationError("Provider and user_id are required")

        with logfire.span(
            "session_reconciler.create_or_merge_auth_session", provider=tokens.provider
        ):
            async with self.locks.hold(provider_key(tokens.provider, tokens.user_id)):
                resolved = await self.get_user_auth_for_session(session, tokens)
                resolved_id = resolved.id if resolved is not None else None

                # Serialize with credential and profile writes to the same user
                async with self.locks.hold(user_auth_key(resolved_id)):
                    user = UserAuth()
                    if resolved_id is not None:
                        user = await self.user_auth_repository.find_by_id(resolved_id) or user
                    link = await self.user_auth_details_repository.find_by_provider(
                        tokens.provider, tokens.user_id
                    ) or UserAuthDetails(provider=tokens.provider, user_id=tokens.user_id)

                    link = populate_missing_link(link, tokens)
                    user = populate_missing_user(user, link)

                    now = utcnow()
                    user = user.model_copy(
                        update={"modified_date": now, "created_date": user.created_date or now}
                    )
                    created_user = user.id is None
                    user = await self.user_auth_repository.save(user)

                    link = link.model_copy(
                        update={
                            "user_auth_id": user.id,
                            "created_date": link.created_date or user.modified_date,
                            "modified_date": user.modified_date,
                        }
                    )
                    created_link = link.id is None
                    link = await self.user_auth_details_repository.save(link)

            logfire.info(
                "Auth session merged",
                provider=link.provider,
                user_auth_id=user.id,
                created_user=created_user,
                created_link=created_link,
            )
            return link

    async def load_user_auth(
        self, session: AuthSession | None, tokens: AuthTokens | None = None
    ) -> AuthSession:
        """Populate a session from its stored user and login links.

        Args:
            session: Session to populate
            tokens: Provider tokens of the current login, if any

        Returns:
            The populated session, or the session unchanged if no user resolves

        Raises:
            ValueError: If session is None
        """
        if session is None:
            raise ValueError("session is required")

        user = await self.get_user_auth_for_session(session, tokens)
        if user is None:
            return session

        links = await self.user_auth_details_repository.find_all_by_user_auth_id(user.id)
        return populate_session(session, user, links)

    async def save_user_auth_session(self, session: AuthSession) -> UserAuth:
        """Write a session's identity and profile back to its user.

        A session without a user id creates a new user. Identity changes
        are checked for conflicts first, and renaming a user clears its
        digest hash, which was derived from the old user name.

        Args:
            session: Authenticated session

        Returns:
            Stored user

        Raises:
            NotFoundError: If the session names a user that does not exist
            DuplicateUserNameError: If the user name belongs to another user
            DuplicateEmailError: If the email belongs to another user
        """
        fields = user_from_session(session)
        user_auth_id = parse_user_auth_id(session.user_auth_id)

        with logfire.span(
            "session_reconciler.save_user_auth_session", user_auth_id=user_auth_id
        ):
            async with self.locks.hold(
                user_auth_key(user_auth_id),
                user_name_key(fields.user_name),
                email_key(fields.email),
            ):
                existing = None
                if session.user_auth_id:
                    existing = await self.get_user_auth(session.user_auth_id)
                    if existing is None:
                        raise NotFoundError("UserAuth", session.user_auth_id)
                    user = existing.model_copy(update=fields.model_dump(exclude_unset=True))
                else:
                    user = fields

                await self.uniqueness_guard.assert_no_conflict(user, except_existing=existing)

                if existing is not None and existing.user_name != user.user_name:
                    user = user.model_copy(update={"digest_ha1_hash": None})
                    logfire.warn(
                        "Digest hash cleared after user name change",
                        user_auth_id=existing.id,
                    )

                saved = await self._stamp_and_save(user)

            logfire.info("User auth saved", user_auth_id=saved.id)
            return saved

    async def save_user_auth(self, user: UserAuth) -> UserAuth:
        """Stamp dates and store a user as given.

        Credentials are stored as they are; use the credential service to
        change a password.
        """
        async with self.locks.hold(user_auth_key(user.id)):
            saved = await self._stamp_and_save(user)

        logfire.info("User auth saved", user_auth_id=saved.id)
        return saved

    async def _stamp_and_save(self, user: UserAuth) -> UserAuth:
        now = utcnow()
        user = user.model_copy(
            update={"modified_date": now, "created_date": user.created_date or now}
        )
        return await self.user_auth_repository.save(user)

    async def delete_user_auth(self, user_auth_id: str | int | None) -> None:
        """Delete a user together with all of its login links.

        Unknown ids are ignored.
        """
        parsed = parse_user_auth_id(user_auth_id)
        if parsed is None:
            return

        with logfire.span("session_reconciler.delete_user_auth", user_auth_id=parsed):
            async with self.locks.hold(user_auth_key(parsed)):
                await self.user_auth_repository.delete(parsed)
                removed = await self.user_auth_details_repository.delete_all_by_user_auth_id(
                    parsed
                )
            logfire.info("User auth deleted", user_auth_id=parsed, links_removed=removed)
