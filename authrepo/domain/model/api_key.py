"""API key record."""

from datetime import datetime

from pydantic import Field

from authrepo.domain.model.common import DomainModel, utcnow
from authrepo.domain.value import ApiKeyId
from authrepo.domain.value.common import as_utc


class ApiKey(DomainModel):
    """Credential for key-based authentication.

    Keys are never deleted; cancelling one sets ``cancelled_date``.
    """

    id: ApiKeyId  # The key itself
    user_auth_id: str
    environment: str | None = None  # e.g. "live", "test"
    key_type: str | None = None  # e.g. "secret", "publishable"
    notes: str | None = None
    ref_id: int | None = None
    ref_id_str: str | None = None
    meta: dict[str, str] = Field(default_factory=dict)
    created_date: datetime = Field(default_factory=utcnow)
    expiry_date: datetime | None = None
    cancelled_date: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        """Whether the key can be used at ``now``.

        A key is active when it has not been cancelled and has either no
        expiry or an expiry that has not passed yet.
        """
        if self.cancelled_date is not None:
            return False
        return self.expiry_date is None or self.expiry_date >= as_utc(now)
