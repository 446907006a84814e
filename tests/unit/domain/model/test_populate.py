"""Unit tests for populate-missing field mappings."""

from authrepo.domain.model import UserAuth, UserAuthDetails
from authrepo.domain.model.populate import (
    is_unset,
    populate_missing_link,
    populate_missing_user,
    populate_session,
    user_from_session,
)
from authrepo.domain.value import AuthSession, AuthTokens


class TestPopulateMissing:
    """Tests for populate_missing_link() and populate_missing_user()."""

    def test_link_takes_only_missing_fields(self):
        """Should fill unset link fields and keep set ones."""
        link = UserAuthDetails(provider="google", user_id="1", display_name="Kept")
        tokens = AuthTokens(
            provider="google",
            user_id="1",
            display_name="Ignored",
            city="Dublin",
            access_token="t",
            items={"scope": "email"},
        )

        merged = populate_missing_link(link, tokens)

        assert merged.display_name == "Kept"
        assert merged.city == "Dublin"
        assert merged.access_token == "t"
        assert merged.items == {"scope": "email"}

    def test_empty_strings_count_as_unset(self):
        """Should overwrite empty strings but not fill from them."""
        link = UserAuthDetails(provider="google", user_id="1", city="")
        tokens = AuthTokens(city="Cork", country="")

        merged = populate_missing_link(link, tokens)

        assert merged.city == "Cork"
        assert merged.country is None

    def test_user_never_takes_identity_fields_from_link(self):
        """Should leave user_name and email to the local account."""
        link = UserAuthDetails(
            provider="google", user_id="1", user_name="g-alice", email="a@gmail.com", city="Cork"
        )

        merged = populate_missing_user(UserAuth(), link)

        assert merged.user_name is None
        assert merged.email is None
        assert merged.city == "Cork"

    def test_nothing_to_merge_returns_same_record(self):
        link = UserAuthDetails(provider="google", user_id="1")

        assert populate_missing_link(link, AuthTokens()) is link

    def test_is_unset(self):
        assert is_unset(None)
        assert is_unset("")
        assert is_unset([])
        assert is_unset({})
        assert not is_unset(0)
        assert not is_unset(False)


class TestSessionMapping:
    """Tests for user_from_session() and populate_session()."""

    def test_user_from_session_copies_identity_and_profile(self):
        """Should build an unsaved user with the session's fields."""
        session = AuthSession(
            id="s", user_name="alice", email="a@x.io", city="Cork", roles=["admin"]
        )

        user = user_from_session(session)

        assert user.id is None
        assert user.user_name == "alice"
        assert user.email == "a@x.io"
        assert user.city == "Cork"
        assert user.roles == ["admin"]

    def test_populate_session(self):
        """Should copy user fields, ids and provider tokens onto the session."""
        user = UserAuth(id=5, email="a@x.io", permissions=["read"])
        link = UserAuthDetails(
            id=1, user_auth_id=5, provider="github", user_id="9", access_token="gh"
        )
        session = AuthSession(id="s", is_authenticated=True, city="Cork")

        populated = populate_session(session, user, [link])

        assert populated.user_auth_id == "5"
        assert populated.user_auth_name == "a@x.io"
        assert populated.email == "a@x.io"
        assert populated.city == "Cork"
        assert populated.permissions == ["read"]
        assert populated.is_authenticated is True
        assert populated.provider_oauth_access == [
            AuthTokens(provider="github", user_id="9", access_token="gh")
        ]
