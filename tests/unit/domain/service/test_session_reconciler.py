"""Unit tests for SessionReconciler."""

import asyncio

import pytest

from authrepo.domain.error import (
    DuplicateEmailError,
    DuplicateUserNameError,
    NotFoundError,
    ValidationError,
)
from authrepo.domain.model import UserAuth, UserAuthDetails
from authrepo.domain.value import AuthSession, AuthTokens


def google_tokens(**overrides) -> AuthTokens:
    values = {
        "provider": "google",
        "user_id": "g-123",
        "access_token": "ya29.token",
        "email": "alice@gmail.com",
        "display_name": "Alice G",
        "first_name": "Alice",
    }
    values.update(overrides)
    return AuthTokens(**values)


class TestGetUserAuthForSession:
    """Tests for SessionReconciler.get_user_auth_for_session()."""

    @pytest.mark.asyncio
    async def test_resolves_by_session_user_auth_id(self, session_reconciler, user_auth_repo):
        """Should prefer the id stored in the session."""
        # Arrange
        alice = await user_auth_repo.save(UserAuth(user_name="alice"))
        session = AuthSession(user_auth_id=str(alice.id), user_auth_name="someone-else")

        # Act
        user = await session_reconciler.get_user_auth_for_session(session)

        # Assert
        assert user.id == alice.id

    @pytest.mark.asyncio
    async def test_falls_back_to_user_auth_name(self, session_reconciler, user_auth_repo):
        """Should try the user name when the id does not resolve."""
        # Arrange
        alice = await user_auth_repo.save(UserAuth(user_name="alice"))
        session = AuthSession(user_auth_id="999", user_auth_name="alice")

        # Act
        user = await session_reconciler.get_user_auth_for_session(session)

        # Assert
        assert user.id == alice.id

    @pytest.mark.asyncio
    async def test_falls_back_to_provider_link(
        self, session_reconciler, user_auth_repo, details_repo
    ):
        """Should find the owner of the link matching the tokens."""
        # Arrange
        alice = await user_auth_repo.save(UserAuth(user_name="alice"))
        await details_repo.save(
            UserAuthDetails(provider="google", user_id="g-123", user_auth_id=alice.id)
        )

        # Act
        user = await session_reconciler.get_user_auth_for_session(
            AuthSession(), google_tokens()
        )

        # Assert
        assert user.id == alice.id

    @pytest.mark.asyncio
    async def test_returns_none_without_tokens(self, session_reconciler):
        """Should give up when nothing identifies the user."""
        assert await session_reconciler.get_user_auth_for_session(AuthSession()) is None
        assert (
            await session_reconciler.get_user_auth_for_session(
                AuthSession(), AuthTokens(provider="google")
            )
            is None
        )

    @pytest.mark.asyncio
    async def test_dangling_link_returns_none(self, session_reconciler, details_repo):
        """Should return None when the link's owner no longer exists."""
        # Arrange
        await details_repo.save(
            UserAuthDetails(provider="google", user_id="g-123", user_auth_id=42)
        )

        # Act
        user = await session_reconciler.get_user_auth_for_session(
            AuthSession(), google_tokens()
        )

        # Assert
        assert user is None

    @pytest.mark.asyncio
    async def test_non_integer_session_id_resolves_to_none(self, session_reconciler):
        """Should treat ids that are not integers as unknown."""
        session = AuthSession(user_auth_id="abc")

        assert await session_reconciler.get_user_auth_for_session(session) is None


class TestCreateOrMergeAuthSession:
    """Tests for SessionReconciler.create_or_merge_auth_session()."""

    @pytest.mark.asyncio
    async def test_new_login_creates_user_and_link(
        self, session_reconciler, user_auth_repo, details_repo
    ):
        """Should create a blank user populated from the provider profile."""
        # Act
        link = await session_reconciler.create_or_merge_auth_session(
            AuthSession(), google_tokens()
        )

        # Assert
        assert link.id is not None
        assert link.user_auth_id is not None
        assert link.access_token == "ya29.token"
        assert link.email == "alice@gmail.com"

        user = await user_auth_repo.find_by_id(link.user_auth_id)
        assert user.display_name == "Alice G"
        assert user.first_name == "Alice"
        # Identity fields stay owned by the local account
        assert user.email is None
        assert user.user_name is None
        assert user.created_date is not None
        assert link.created_date == user.modified_date
        assert link.modified_date == user.modified_date

    @pytest.mark.asyncio
    async def test_merge_is_idempotent(self, session_reconciler, details_repo):
        """Should keep exactly one link when the same login is merged twice."""
        # Arrange
        first = await session_reconciler.create_or_merge_auth_session(
            AuthSession(), google_tokens()
        )

        # Act
        second = await session_reconciler.create_or_merge_auth_session(
            AuthSession(), google_tokens(access_token="ya29.newer")
        )

        # Assert
        assert second.id == first.id
        assert second.user_auth_id == first.user_auth_id
        links = await details_repo.find_all_by_user_auth_id(first.user_auth_id)
        assert len(links) == 1
        # Set fields are never overwritten
        assert links[0].access_token == "ya29.token"
        assert links[0].created_date == first.created_date

    @pytest.mark.asyncio
    async def test_merge_into_session_user(self, session_reconciler, user_auth_repo):
        """Should link the provider account to the session's user."""
        # Arrange
        alice = await user_auth_repo.save(
            UserAuth(user_name="alice", email="alice@x.io", display_name="Alice")
        )
        session = AuthSession(user_auth_id=str(alice.id))

        # Act
        link = await session_reconciler.create_or_merge_auth_session(session, google_tokens())

        # Assert
        assert link.user_auth_id == alice.id
        user = await user_auth_repo.find_by_id(alice.id)
        assert user.display_name == "Alice"  # kept
        assert user.first_name == "Alice"  # filled in
        assert user.email == "alice@x.io"

    @pytest.mark.asyncio
    async def test_missing_provider_identity_raises(self, session_reconciler):
        """Should refuse tokens without provider and user id."""
        with pytest.raises(ValidationError):
            await session_reconciler.create_or_merge_auth_session(
                AuthSession(), AuthTokens(provider="google")
            )

    @pytest.mark.asyncio
    async def test_merge_keeps_password_changed_during_merge(
        self, session_reconciler, credential_service, user_auth_repo, monkeypatch
    ):
        """Should not write back credentials read before a concurrent password change."""
        # Arrange
        alice = await credential_service.create_user_auth(UserAuth(user_name="alice"), "old-pw")
        resolved = asyncio.Event()
        proceed = asyncio.Event()
        find_by_id = user_auth_repo.find_by_id
        calls = 0

        async def paused_find_by_id(user_auth_id):
            nonlocal calls
            user = await find_by_id(user_auth_id)
            calls += 1
            if calls == 1:
                resolved.set()
                await proceed.wait()
            return user

        monkeypatch.setattr(user_auth_repo, "find_by_id", paused_find_by_id)

        # Act
        merge = asyncio.create_task(
            session_reconciler.create_or_merge_auth_session(
                AuthSession(user_auth_id=str(alice.id)), google_tokens()
            )
        )
        await resolved.wait()
        await credential_service.update_user_auth(alice, alice, password="new-pw")
        proceed.set()
        link = await merge

        # Assert
        assert link.user_auth_id == alice.id
        assert await credential_service.try_authenticate("alice", "new-pw") is not None
        assert await credential_service.try_authenticate("alice", "old-pw") is None


class TestLoadUserAuth:
    """Tests for SessionReconciler.load_user_auth()."""

    @pytest.mark.asyncio
    async def test_populates_session_from_user_and_links(self, session_reconciler, user_auth_repo):
        """Should copy the user's profile and provider tokens onto the session."""
        # Arrange
        alice = await user_auth_repo.save(
            UserAuth(user_name="alice", email="alice@x.io", roles=["admin"])
        )
        await session_reconciler.create_or_merge_auth_session(
            AuthSession(user_auth_id=str(alice.id)), google_tokens()
        )

        # Act
        session = await session_reconciler.load_user_auth(
            AuthSession(id="sess-1", user_auth_name="alice")
        )

        # Assert
        assert session.id == "sess-1"
        assert session.user_auth_id == str(alice.id)
        assert session.user_auth_name == "alice"
        assert session.email == "alice@x.io"
        assert session.roles == ["admin"]
        assert [t.provider for t in session.provider_oauth_access] == ["google"]
        assert session.provider_oauth_access[0].access_token == "ya29.token"

    @pytest.mark.asyncio
    async def test_unresolved_session_is_returned_unchanged(self, session_reconciler):
        """Should leave sessions of unknown users alone."""
        session = AuthSession(user_auth_name="ghost")

        assert await session_reconciler.load_user_auth(session) == session

    @pytest.mark.asyncio
    async def test_none_session_raises(self, session_reconciler):
        """Should require a session."""
        with pytest.raises(ValueError):
            await session_reconciler.load_user_auth(None)


class TestSaveUserAuthSession:
    """Tests for SessionReconciler.save_user_auth_session()."""

    @pytest.mark.asyncio
    async def test_new_session_creates_user(self, session_reconciler):
        """Should create a user from a session that has no user id."""
        # Act
        user = await session_reconciler.save_user_auth_session(
            AuthSession(user_name="carol", display_name="Carol", roles=["member"])
        )

        # Assert
        assert user.id is not None
        assert user.user_name == "carol"
        assert user.roles == ["member"]

    @pytest.mark.asyncio
    async def test_existing_session_updates_user(self, session_reconciler, user_auth_repo, hasher):
        """Should write profile changes back without touching credentials."""
        # Arrange
        password_hash, salt = hasher.hash("pw")
        alice = await user_auth_repo.save(
            UserAuth(user_name="alice", password_hash=password_hash, salt=salt)
        )

        # Act
        user = await session_reconciler.save_user_auth_session(
            AuthSession(user_auth_id=str(alice.id), display_name="Alice A")
        )

        # Assert
        assert user.id == alice.id
        assert user.display_name == "Alice A"
        assert user.user_name == "alice"
        assert user.password_hash == password_hash

    @pytest.mark.asyncio
    async def test_unknown_session_user_raises(self, session_reconciler):
        """Should refuse a session naming a user that does not exist."""
        with pytest.raises(NotFoundError):
            await session_reconciler.save_user_auth_session(AuthSession(user_auth_id="404"))

    @pytest.mark.asyncio
    async def test_rename_clears_digest_hash(self, session_reconciler, credential_service):
        """Should drop the digest hash derived from the previous user name."""
        # Arrange
        alice = await credential_service.create_user_auth(UserAuth(user_name="alice"), "pw1")
        assert alice.digest_ha1_hash is not None

        # Act
        user = await session_reconciler.save_user_auth_session(
            AuthSession(user_auth_id=str(alice.id), user_name="alice2")
        )

        # Assert
        assert user.user_name == "alice2"
        assert user.digest_ha1_hash is None
        assert user.password_hash == alice.password_hash

    @pytest.mark.asyncio
    async def test_profile_change_keeps_digest_hash(self, session_reconciler, credential_service):
        """Should keep the digest hash when the user name is unchanged."""
        # Arrange
        alice = await credential_service.create_user_auth(UserAuth(user_name="alice"), "pw1")

        # Act
        user = await session_reconciler.save_user_auth_session(
            AuthSession(user_auth_id=str(alice.id), user_name="alice", display_name="Alice")
        )

        # Assert
        assert user.digest_ha1_hash == alice.digest_ha1_hash

    @pytest.mark.asyncio
    async def test_rename_to_taken_user_name_raises(self, session_reconciler, user_auth_repo):
        """Should refuse a user name that belongs to another user."""
        # Arrange
        alice = await user_auth_repo.save(UserAuth(user_name="alice"))
        await user_auth_repo.save(UserAuth(user_name="bob"))

        # Act & Assert
        with pytest.raises(DuplicateUserNameError):
            await session_reconciler.save_user_auth_session(
                AuthSession(user_auth_id=str(alice.id), user_name="bob")
            )
        assert (await user_auth_repo.find_by_id(alice.id)).user_name == "alice"

    @pytest.mark.asyncio
    async def test_new_session_with_taken_email_raises(self, session_reconciler, user_auth_repo):
        """Should refuse to create a user with another user's email."""
        # Arrange
        await user_auth_repo.save(UserAuth(user_name="alice", email="alice@x.io"))

        # Act & Assert
        with pytest.raises(DuplicateEmailError):
            await session_reconciler.save_user_auth_session(
                AuthSession(user_name="carol", email="alice@x.io")
            )


class TestDeleteUserAuth:
    """Tests for SessionReconciler.delete_user_auth()."""

    @pytest.mark.asyncio
    async def test_delete_cascades_to_own_links_only(
        self, session_reconciler, user_auth_repo, details_repo
    ):
        """Should remove the user and its links, leaving other users' links."""
        # Arrange
        alice_link = await session_reconciler.create_or_merge_auth_session(
            AuthSession(), google_tokens()
        )
        bob_link = await session_reconciler.create_or_merge_auth_session(
            AuthSession(), google_tokens(user_id="g-456", email="bob@gmail.com")
        )

        # Act
        await session_reconciler.delete_user_auth(str(alice_link.user_auth_id))

        # Assert
        assert await user_auth_repo.find_by_id(alice_link.user_auth_id) is None
        assert await details_repo.find_all_by_user_auth_id(alice_link.user_auth_id) == []
        remaining = await details_repo.find_by_provider("google", "g-456")
        assert remaining.id == bob_link.id
        assert remaining.user_auth_id == bob_link.user_auth_id
