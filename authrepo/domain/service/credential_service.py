"""Credential domain service.

Creates and updates local credentials and verifies password and HTTP
digest logins, keeping the failed-login counters and lockout state.
"""

import re
from collections.abc import Mapping

import logfire

from authrepo.config import AuthSettings
from authrepo.domain.error import ValidationError
from authrepo.domain.model.common import utcnow
from authrepo.domain.model.user_auth import UserAuth
from authrepo.domain.repository import UserAuthRepository
from authrepo.util.locks import KeyedLock, email_key, user_auth_key, user_name_key

from .base import Service
from .uniqueness_guard import UniquenessGuard

# 3-20 characters; letters and digits, optionally separated by single . _ or -
VALID_USER_NAME = re.compile(r"^(?=.{3,20}$)([A-Za-z0-9][._-]?)*$")


class PasswordHasher:
    """Salted password hashing primitive."""

    def hash(self, password: str) -> tuple[str, str]:
        """Hash a password with a fresh salt.

        Args:
            password: Plain text password

        Returns:
            Tuple of (hash, salt)
        """
        raise NotImplementedError

    def verify(self, password: str, password_hash: str, salt: str) -> bool:
        """Check a password against a stored hash and salt."""
        raise NotImplementedError


class DigestAuth:
    """HTTP digest authentication primitive."""

    def compute_ha1(self, user_name: str, realm: str, password: str) -> str:
        """Compute the HA1 hash stored for digest logins."""
        raise NotImplementedError

    def validate_response(
        self,
        digest_headers: Mapping[str, str],
        private_key: str,
        nonce_timeout: int,
        ha1: str,
        sequence: str | None,
    ) -> bool:
        """Validate a digest challenge response.

        Args:
            digest_headers: Parsed Authorization header values plus request data
            private_key: Server secret the nonce was issued with
            nonce_timeout: Seconds a nonce stays fresh
            ha1: Stored HA1 hash of the user
            sequence: Last nonce count seen for this nonce, None if unknown

        Returns:
            True if the response proves knowledge of the password
        """
        raise NotImplementedError


def validate_new_user(user: UserAuth, password: str | None = None, require_password: bool = True) -> None:
    """Validate the identity fields of a user about to be stored.

    Args:
        user: User to validate
        password: Password supplied with the user
        require_password: Whether a password must be supplied

    Raises:
        ValidationError: If a required field is missing or malformed
    """
    if require_password and not password:
        raise ValidationError("Password is required")
    if password is not None and not password:
        raise ValidationError("Password must not be empty")
    if not user.user_name and not user.email:
        raise ValidationError("Username or email is required")
    if user.user_name and not VALID_USER_NAME.match(user.user_name):
        raise ValidationError(
            "Username must be 3-20 characters of letters, digits and single . _ - separators"
        )


class CredentialService(Service):
    """Domain service for local credentials and login verification."""

    def __init__(
        self,
        user_auth_repository: UserAuthRepository,
        uniqueness_guard: UniquenessGuard,
        password_hasher: PasswordHasher,
        digest_auth: DigestAuth,
        auth_settings: AuthSettings,
        locks: KeyedLock,
    ) -> None:
        """Initialize credential service.

        Args:
            user_auth_repository: User auth repository
            uniqueness_guard: User name/email uniqueness guard
            password_hasher: Password hashing primitive
            digest_auth: Digest authentication primitive
            auth_settings: Auth settings (realm, lockout policy)
            locks: Write locks shared with the other services
        """
        self.user_auth_repository = user_auth_repository
        self.uniqueness_guard = uniqueness_guard
        self.password_hasher = password_hasher
        self.digest_auth = digest_auth
        self.auth_settings = auth_settings
        self.locks = locks
        self._decoy: tuple[str, str] | None = None

    async def create_user_auth(self, new_user: UserAuth, password: str) -> UserAuth:
        """Create a user with a password.

        Args:
            new_user: User to create
            password: Plain text password

        Returns:
            Stored user with its ID

        Raises:
            ValidationError: If identity fields or the password are missing
            DuplicateUserNameError: If the user name is taken
            DuplicateEmailError: If the email is taken
        """
        validate_new_user(new_user, password)

        with logfire.span("credential_service.create_user_auth"):
            async with self.locks.hold(
                user_name_key(new_user.user_name), email_key(new_user.email)
            ):
                await self.uniqueness_guard.assert_no_conflict(new_user)

                password_hash, salt = self.password_hasher.hash(password)
                now = utcnow()
                user = new_user.model_copy(
                    update={
                        "password_hash": password_hash,
                        "salt": salt,
                        "digest_ha1_hash": self._ha1(new_user.user_name, password),
                        "created_date": now,
                        "modified_date": now,
                    }
                )
                saved = await self.user_auth_repository.save(user)

            logfire.info("User auth created", user_auth_id=saved.id)
            return saved

    async def update_user_auth(
        self, existing: UserAuth, updated: UserAuth, password: str | None = None
    ) -> UserAuth:
        """Update a user, optionally changing the password.

        The digest hash is derived from the user name and the password, so it
        is recomputed when a new password is given. When only the user name
        changes there is no plain text password to derive it from; the stale
        hash is cleared and digest logins stay refused until the password is
        set again.

        Args:
            existing: The user as currently stored
            updated: The new version of the user
            password: New plain text password, None to keep the current one

        Returns:
            Stored user

        Raises:
            ValidationError: If identity fields are missing or the password is empty
            DuplicateUserNameError: If the user name belongs to another user
            DuplicateEmailError: If the email belongs to another user
        """
        validate_new_user(updated, password, require_password=False)

        with logfire.span("credential_service.update_user_auth", user_auth_id=existing.id):
            async with self.locks.hold(
                user_auth_key(existing.id),
                user_name_key(updated.user_name),
                email_key(updated.email),
            ):
                await self.uniqueness_guard.assert_no_conflict(updated, except_existing=existing)

                password_hash, salt = existing.password_hash, existing.salt
                digest_hash = existing.digest_ha1_hash
                if password is not None:
                    password_hash, salt = self.password_hasher.hash(password)
                    digest_hash = self._ha1(updated.user_name, password)
                elif existing.user_name != updated.user_name:
                    digest_hash = None
                    logfire.warn(
                        "Digest hash cleared after user name change",
                        user_auth_id=existing.id,
                    )

                user = updated.model_copy(
                    update={
                        "id": existing.id,
                        "password_hash": password_hash,
                        "salt": salt,
                        "digest_ha1_hash": digest_hash,
                        "created_date": existing.created_date,
                        "modified_date": utcnow(),
                    }
                )
                saved = await self.user_auth_repository.save(user)

            logfire.info(
                "User auth updated",
                user_auth_id=saved.id,
                password_changed=password is not None,
            )
            return saved

    async def try_authenticate(self, user_name: str, password: str) -> UserAuth | None:
        """Verify a user name (or email) and password.

        Unknown users, locked accounts and wrong passwords all yield None.
        Unknown users still cost a hash verification.

        Args:
            user_name: User name or email
            password: Plain text password

        Returns:
            The authenticated user, None otherwise
        """
        with logfire.span("credential_service.try_authenticate"):
            user = await self.uniqueness_guard.find_by_name_or_email(user_name)
            if user is None or not user.password_hash or not user.salt:
                decoy_hash, decoy_salt = self._decoy_credentials()
                self.password_hasher.verify(password, decoy_hash, decoy_salt)
                if user is None:
                    logfire.info("Password login failed", reason="unknown_user")
                    return None
                logfire.info("Password login failed", reason="no_password", user_auth_id=user.id)
                await self._record_invalid_login_attempt(user)
                return None

            if user.is_locked(self.auth_settings.lockout_duration, utcnow()):
                logfire.warn("Password login refused", reason="locked", user_auth_id=user.id)
                await self._record_invalid_login_attempt(user)
                return None

            if self.password_hasher.verify(password, user.password_hash, user.salt):
                return await self._record_successful_login(user)

            logfire.info("Password login failed", reason="wrong_password", user_auth_id=user.id)
            await self._record_invalid_login_attempt(user)
            return None

    async def try_authenticate_digest(
        self,
        digest_headers: Mapping[str, str],
        private_key: str,
        nonce_timeout: int | None = None,
        sequence: str | None = None,
    ) -> UserAuth | None:
        """Verify an HTTP digest challenge response.

        Args:
            digest_headers: Digest header values, including "username"
            private_key: Server secret the nonce was issued with
            nonce_timeout: Seconds a nonce stays fresh, the configured
                nonce_timeout_seconds if None
            sequence: Last nonce count seen for this nonce

        Returns:
            The authenticated user, None otherwise
        """
        if nonce_timeout is None:
            nonce_timeout = self.auth_settings.nonce_timeout_seconds

        with logfire.span("credential_service.try_authenticate_digest"):
            user = await self.uniqueness_guard.find_by_name_or_email(
                digest_headers.get("username")
            )
            if user is None:
                logfire.info("Digest login failed", reason="unknown_user")
                return None

            if user.is_locked(self.auth_settings.lockout_duration, utcnow()):
                logfire.warn("Digest login refused", reason="locked", user_auth_id=user.id)
                await self._record_invalid_login_attempt(user)
                return None

            if user.digest_ha1_hash and self.digest_auth.validate_response(
                digest_headers, private_key, nonce_timeout, user.digest_ha1_hash, sequence
            ):
                return await self._record_successful_login(user)

            logfire.info("Digest login failed", reason="invalid_response", user_auth_id=user.id)
            await self._record_invalid_login_attempt(user)
            return None

    async def _record_successful_login(self, user: UserAuth) -> UserAuth:
        async with self.locks.hold(user_auth_key(user.id)):
            current = await self.user_auth_repository.find_by_id(user.id) or user
            updated = current.model_copy(
                update={
                    "invalid_login_attempts": 0,
                    "last_login_attempt": utcnow(),
                    "locked_date": None,
                }
            )
            saved = await self.user_auth_repository.save(updated)

        logfire.info("Login succeeded", user_auth_id=saved.id)
        return saved

    async def _record_invalid_login_attempt(self, user: UserAuth) -> UserAuth:
        async with self.locks.hold(user_auth_key(user.id)):
            current = await self.user_auth_repository.find_by_id(user.id) or user
            now = utcnow()
            attempts = current.invalid_login_attempts + 1
            update = {"invalid_login_attempts": attempts, "last_login_attempt": now}

            max_attempts = self.auth_settings.max_login_attempts
            if (
                max_attempts is not None
                and attempts >= max_attempts
                and not current.is_locked(self.auth_settings.lockout_duration, now)
            ):
                update["locked_date"] = now
                logfire.warn("Account locked", user_auth_id=current.id, attempts=attempts)

            saved = await self.user_auth_repository.save(current.model_copy(update=update))

        return saved

    def _ha1(self, user_name: str | None, password: str) -> str | None:
        # Digest logins are by user name; email-only users get no HA1
        if not user_name:
            return None
        return self.digest_auth.compute_ha1(user_name, self.auth_settings.realm, password)

    def _decoy_credentials(self) -> tuple[str, str]:
        if self._decoy is None:
            self._decoy = self.password_hasher.hash("decoy-password")
        return self._decoy
