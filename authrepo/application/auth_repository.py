"""Auth repository.

The single entry point used by authentication flows. It owns user auth
records, external login links and API keys, and delegates the work to the
domain services.
"""

from collections.abc import Iterable, Mapping

import logfire

from authrepo.config import AuthSettings
from authrepo.domain.model.api_key import ApiKey
from authrepo.domain.model.user_auth import UserAuth
from authrepo.domain.model.user_auth_details import UserAuthDetails
from authrepo.domain.repository import DocumentStore
from authrepo.domain.service import (
    ApiKeyService,
    CredentialService,
    SessionReconciler,
    UniquenessGuard,
)
from authrepo.domain.value import AuthSession, AuthTokens
from authrepo.persistence.schema import AuthSchema
from authrepo.util.error import ConfigurationError


class AuthRepository:
    """User auth, login link and API key repository on a document store.

    Build it with :meth:`create`, or resolve it from the DI container; both
    prepare the collections. Instances are safe to share between
    concurrent tasks.
    """

    def __init__(
        self,
        schema: AuthSchema,
        auth_settings: AuthSettings,
        uniqueness_guard: UniquenessGuard,
        credential_service: CredentialService,
        session_reconciler: SessionReconciler,
        api_key_service: ApiKeyService,
    ) -> None:
        """Initialize auth repository.

        Call :meth:`initialize` before use.

        Args:
            schema: Collection schema manager
            auth_settings: Auth settings
            uniqueness_guard: User name/email uniqueness guard
            credential_service: Credential domain service
            session_reconciler: Session reconciler domain service
            api_key_service: API key domain service
        """
        self.schema = schema
        self.auth_settings = auth_settings
        self.uniqueness_guard = uniqueness_guard
        self.credential_service = credential_service
        self.session_reconciler = session_reconciler
        self.api_key_service = api_key_service

    @classmethod
    async def create(cls, store: DocumentStore, auth_settings: AuthSettings) -> "AuthRepository":
        """Build an auth repository on a store and prepare its collections.

        Services are wired by the same DI providers the application
        container uses.

        Args:
            store: Document store
            auth_settings: Auth settings

        Returns:
            Ready auth repository

        Raises:
            ConfigurationError: If collections are missing after initialization
        """
        # The DI providers import this module
        from authrepo.util.di.container import create_store_container

        container = create_store_container(store, auth_settings)
        try:
            return await container.get(cls)
        finally:
            await container.close()

    async def initialize(self) -> None:
        """Create missing collections if enabled, then require all of them.

        Raises:
            ConfigurationError: If any collection is missing
        """
        if self.auth_settings.create_missing_collections:
            await self.schema.create_missing_collections()

        missing = await self.schema.missing_collections()
        if missing:
            logfire.error("Auth collections missing", collections=missing)
            raise ConfigurationError(
                f"Auth collections missing: {', '.join(missing)}. "
                "Enable AUTH__CREATE_MISSING_COLLECTIONS or create them first."
            )

    # Credentials

    async def create_user_auth(self, new_user: UserAuth, password: str) -> UserAuth:
        """Create a user with a password.

        Raises:
            ValidationError: If identity fields or the password are missing
            DuplicateUserNameError: If the user name is taken
            DuplicateEmailError: If the email is taken
        """
        return await self.credential_service.create_user_auth(new_user, password)

    async def update_user_auth(
        self, existing: UserAuth, updated: UserAuth, password: str | None = None
    ) -> UserAuth:
        """Update a user, changing the password when one is given.

        Raises:
            ValidationError: If identity fields are missing or the password is empty
            DuplicateUserNameError: If the user name belongs to another user
            DuplicateEmailError: If the email belongs to another user
        """
        return await self.credential_service.update_user_auth(existing, updated, password)

    async def try_authenticate(self, user_name: str, password: str) -> UserAuth | None:
        """Verify a user name (or email) and password; None on failure."""
        return await self.credential_service.try_authenticate(user_name, password)

    async def try_authenticate_digest(
        self,
        digest_headers: Mapping[str, str],
        private_key: str,
        nonce_timeout: int | None = None,
        sequence: str | None = None,
    ) -> UserAuth | None:
        """Verify an HTTP digest challenge response; None on failure.

        Args:
            digest_headers: Digest header values, including "username"
            private_key: Server secret the nonce was issued with
            nonce_timeout: Seconds a nonce stays fresh, from settings if None
            sequence: Last nonce count seen for this nonce
        """
        return await self.credential_service.try_authenticate_digest(
            digest_headers, private_key, nonce_timeout, sequence
        )

    # Users and sessions

    async def get_user_auth(self, user_auth_id: str | int | None) -> UserAuth | None:
        """Get a user by id."""
        return await self.session_reconciler.get_user_auth(user_auth_id)

    async def get_user_auth_by_user_name(self, user_name_or_email: str | None) -> UserAuth | None:
        """Get a user by user name, or by email when the value contains "@"."""
        return await self.uniqueness_guard.find_by_name_or_email(user_name_or_email)

    async def get_user_auth_details(self, user_auth_id: str | int | None) -> list[UserAuthDetails]:
        """Get every login link of a user, oldest first."""
        return await self.session_reconciler.get_user_auth_details(user_auth_id)

    async def get_user_auth_for_session(
        self, session: AuthSession, tokens: AuthTokens | None = None
    ) -> UserAuth | None:
        """Resolve the user a session belongs to."""
        return await self.session_reconciler.get_user_auth_for_session(session, tokens)

    async def create_or_merge_auth_session(
        self, session: AuthSession, tokens: AuthTokens
    ) -> UserAuthDetails:
        """Merge a provider login into the session's user and return its link.

        Raises:
            ValidationError: If tokens lack provider or user_id
        """
        return await self.session_reconciler.create_or_merge_auth_session(session, tokens)

    async def load_user_auth(
        self, session: AuthSession | None, tokens: AuthTokens | None = None
    ) -> AuthSession:
        """Populate a session from its stored user and login links.

        Raises:
            ValueError: If session is None
        """
        return await self.session_reconciler.load_user_auth(session, tokens)

    async def save_user_auth(self, user: UserAuth) -> UserAuth:
        """Store a user as given, stamping its dates."""
        return await self.session_reconciler.save_user_auth(user)

    async def save_user_auth_session(self, session: AuthSession) -> UserAuth:
        """Write a session's identity and profile back to its user.

        Raises:
            NotFoundError: If the session names a user that does not exist
            DuplicateUserNameError: If the user name belongs to another user
            DuplicateEmailError: If the email belongs to another user
        """
        return await self.session_reconciler.save_user_auth_session(session)

    async def delete_user_auth(self, user_auth_id: str | int | None) -> None:
        """Delete a user and its login links; unknown ids are ignored."""
        await self.session_reconciler.delete_user_auth(user_auth_id)

    async def clear(self) -> None:
        """Delete every user, login link and API key."""
        await self.schema.drop_and_recreate()
        logfire.warn("Auth repository cleared")

    # API keys

    async def init_api_key_schema(self) -> None:
        """Create the API key collection and its index if missing."""
        await self.schema.init_api_key_schema()

    async def api_key_exists(self, api_key: str | None) -> bool:
        """Check whether a key is stored; empty keys never are."""
        return await self.api_key_service.api_key_exists(api_key)

    async def get_api_key(self, api_key: str | None) -> ApiKey | None:
        """Get a key by the key itself."""
        return await self.api_key_service.get_api_key(api_key)

    async def get_user_api_keys(self, user_auth_id: str | int) -> list[ApiKey]:
        """Get a user's uncancelled, unexpired keys, oldest first."""
        return await self.api_key_service.get_user_api_keys(user_auth_id)

    async def store_all_api_keys(self, api_keys: Iterable[ApiKey]) -> list[ApiKey]:
        """Insert or replace a batch of keys."""
        return await self.api_key_service.store_all(api_keys)
