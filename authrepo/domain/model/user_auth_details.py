"""External login link.

Links an external authentication provider account to a user auth record.
"""

from datetime import datetime

from pydantic import Field

from authrepo.domain.model.common import DomainModel
from authrepo.domain.value import UserAuthDetailsId, UserAuthId


class UserAuthDetails(DomainModel):
    """External login linked to a user auth record.

    One record per ``(provider, user_id)`` pair. ``user_auth_id`` is a plain
    indexed reference to the owning UserAuth, not an embedded object, so a
    link can outlive a deleted owner only as a dangling reference.
    """

    id: UserAuthDetailsId | None = None
    user_auth_id: UserAuthId | None = None
    provider: str
    user_id: str  # Permanent ID on the provider side

    # Profile reported by the provider
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

    # Tokens
    access_token: str | None = None
    access_token_secret: str | None = None
    refresh_token: str | None = None
    refresh_token_expiry: datetime | None = None
    request_token: str | None = None
    request_token_secret: str | None = None
    items: dict[str, str] = Field(default_factory=dict)

    created_date: datetime | None = None
    modified_date: datetime | None = None
