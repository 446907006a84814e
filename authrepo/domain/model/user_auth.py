"""User auth record.

The canonical identity of a user. Local credentials (password, digest hash)
live here; external logins point back to it through UserAuthDetails.
"""

from datetime import datetime, timedelta

from pydantic import Field

from authrepo.domain.model.common import DomainModel
from authrepo.domain.value import UserAuthId
from authrepo.domain.value.common import as_utc


class UserAuth(DomainModel):
    """Canonical user identity record.

    ``user_name`` and ``email`` are each unique across all records when set.
    ``id`` stays None until the record is first inserted.
    """

    id: UserAuthId | None = None
    user_name: str | None = None
    email: str | None = None
    primary_email: str | None = None

    # Credentials
    password_hash: str | None = None
    salt: str | None = None
    digest_ha1_hash: str | None = None  # MD5(user_name:realm:password)

    # Profile
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
    ref_id: int | None = None
    ref_id_str: str | None = None
    meta: dict[str, str] = Field(default_factory=dict)

    # Login bookkeeping
    invalid_login_attempts: int = Field(default=0, ge=0)
    last_login_attempt: datetime | None = None
    locked_date: datetime | None = None

    created_date: datetime | None = None
    modified_date: datetime | None = None

    def is_locked(self, lockout_duration: timedelta, now: datetime) -> bool:
        """Whether the account is locked out at ``now``.

        Args:
            lockout_duration: How long a lockout lasts
            now: Reference time

        Returns:
            True while the lockout window is open
        """
        if self.locked_date is None:
            return False
        return self.locked_date + lockout_duration > as_utc(now)
