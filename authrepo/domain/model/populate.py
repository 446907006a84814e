"""Field mappings between sessions, provider tokens and stored records.

Merging is "populate missing": a target field is filled from the source only
when the target field is unset and the source field is set. Every mergeable
field is listed explicitly per record kind.
"""

from typing import Any

from authrepo.domain.model.user_auth import UserAuth
from authrepo.domain.model.user_auth_details import UserAuthDetails
from authrepo.domain.value import AuthSession, AuthTokens

# Profile fields shared by users, links, tokens and sessions
PROFILE_FIELDS: tuple[str, ...] = (
    "display_name",
    "first_name",
    "last_name",
    "full_name",
    "company",
    "phone_number",
    "birth_date",
    "birth_date_raw",
    "address",
    "address2",
    "city",
    "state",
    "country",
    "culture",
    "gender",
    "language",
    "mail_address",
    "nickname",
    "postal_code",
    "time_zone",
)

# Token fields -> UserAuthDetails
LINK_FIELDS_FROM_TOKENS: tuple[str, ...] = (
    "user_name",
    "email",
    *PROFILE_FIELDS,
    "access_token",
    "access_token_secret",
    "refresh_token",
    "refresh_token_expiry",
    "request_token",
    "request_token_secret",
    "items",
)

# UserAuthDetails -> UserAuth. user_name and email are reserved: they are
# unique and owned by the local account, so provider values never fill them.
USER_FIELDS_FROM_LINK: tuple[str, ...] = PROFILE_FIELDS

# AuthSession <-> UserAuth
SESSION_USER_FIELDS: tuple[str, ...] = (
    "user_name",
    "email",
    *PROFILE_FIELDS,
    "roles",
    "permissions",
)

# UserAuthDetails -> AuthTokens
TOKEN_FIELDS_FROM_LINK: tuple[str, ...] = ("provider", "user_id", *LINK_FIELDS_FROM_TOKENS)


def is_unset(value: Any) -> bool:
    """None, empty strings and empty collections count as unset."""
    if value is None:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return False


def _missing_updates(target: Any, source: Any, fields: tuple[str, ...]) -> dict[str, Any]:
    updates: dict[str, Any] = {}
    for field in fields:
        if not is_unset(getattr(target, field)):
            continue
        value = getattr(source, field)
        if not is_unset(value):
            updates[field] = value
    return updates


def populate_missing_link(link: UserAuthDetails, tokens: AuthTokens) -> UserAuthDetails:
    """Fill unset link fields from provider tokens.

    Args:
        link: Stored or blank login link
        tokens: Tokens from the provider callback

    Returns:
        The link with missing fields populated
    """
    updates = _missing_updates(link, tokens, LINK_FIELDS_FROM_TOKENS)
    return link.model_copy(update=updates) if updates else link


def populate_missing_user(user: UserAuth, link: UserAuthDetails) -> UserAuth:
    """Fill unset user profile fields from a login link.

    Args:
        user: Stored or blank user
        link: Login link already merged with provider tokens

    Returns:
        The user with missing profile fields populated
    """
    updates = _missing_updates(user, link, USER_FIELDS_FROM_LINK)
    return user.model_copy(update=updates) if updates else user


def user_from_session(session: AuthSession) -> UserAuth:
    """Build a new, unsaved user from the identity held by a session."""
    data = {
        field: getattr(session, field)
        for field in SESSION_USER_FIELDS
        if not is_unset(getattr(session, field))
    }
    return UserAuth(**data)


def tokens_from_link(link: UserAuthDetails) -> AuthTokens:
    """Expose a stored login link as provider tokens."""
    return AuthTokens(**{field: getattr(link, field) for field in TOKEN_FIELDS_FROM_LINK})


def populate_session(
    session: AuthSession, user: UserAuth, links: list[UserAuthDetails]
) -> AuthSession:
    """Copy a stored user and its login links onto a session.

    Set user fields overwrite the session's values; the session's own id and
    authentication flag are left alone.

    Args:
        session: Session to populate
        user: Stored user
        links: The user's login links

    Returns:
        The populated session
    """
    updates: dict[str, Any] = {
        field: getattr(user, field)
        for field in SESSION_USER_FIELDS
        if not is_unset(getattr(user, field))
    }
    updates["user_auth_id"] = str(user.id) if user.id is not None else None
    updates["user_auth_name"] = user.user_name or user.email
    updates["provider_oauth_access"] = [tokens_from_link(link) for link in links]
    return session.model_copy(update=updates)
