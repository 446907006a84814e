"""Authentication value objects.

Sessions and provider tokens are handed in by the calling authentication
flows; the repository reads them and returns updated copies, it never
stores them directly.
"""

from datetime import datetime

from pydantic import Field

from authrepo.domain.value.common import ValueObject


class AuthTokens(ValueObject):
    """Tokens and profile data returned by an external login provider.

    ``provider`` and ``user_id`` together identify the provider account,
    e.g. ``("google", "1093...")``.
    """

    provider: str | None = None
    user_id: str | None = None  # Provider-side identifier

    # Tokens
    access_token: str | None = None
    access_token_secret: str | None = None
    refresh_token: str | None = None
    refresh_token_expiry: datetime | None = None
    request_token: str | None = None
    request_token_secret: str | None = None
    items: dict[str, str] = Field(default_factory=dict)

    # Profile as reported by the provider
    user_name: str | None = None
    display_name: str | None = None
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    email: str | None = None
    phone_number: str | None = None
    birth_date: datetime | None = None
    birth_date_raw: str | None = None
    address: str | None = None
    address2: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    culture: str | None = None
    gender: str | None = None
    language: str | None = None
    mail_address: str | None = None
    nickname: str | None = None
    postal_code: str | None = None
    time_zone: str | None = None


class AuthSession(ValueObject):
    """Authenticated session state owned by the calling flow.

    ``user_auth_id`` is the stored user's id in string form, as sessions
    are serialized by the caller. ``user_auth_name`` holds the user name
    (or email) the session authenticated as.
    """

    id: str | None = None  # Caller's session id, never touched here
    user_auth_id: str | None = None
    user_auth_name: str | None = None
    is_authenticated: bool = False

    user_name: str | None = None
    email: str | None = None
    display_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    company: str | None = None
    phone_number: str | None = None
    birth_date: datetime | None = None
    birth_date_raw: str | None = None
    address: str | None = None
    address2: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    culture: str | None = None
    gender: str | None = None
    language: str | None = None
    mail_address: str | None = None
    nickname: str | None = None
    postal_code: str | None = None
    time_zone: str | None = None

    roles: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)

    # One entry per linked external login
    provider_oauth_access: list[AuthTokens] = Field(default_factory=list)
