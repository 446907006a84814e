"""Strongly typed identifiers for authentication records.

User auth and login link ids are surrogate integers assigned by the store on
first insert. API keys are identified by the key string itself.
"""

from typing import NewType

UserAuthId = NewType("UserAuthId", int)
UserAuthDetailsId = NewType("UserAuthDetailsId", int)
ApiKeyId = NewType("ApiKeyId", str)


def parse_user_auth_id(value: str | int | None) -> UserAuthId | None:
    """Parse a user auth id as carried by sessions and API keys.

    Sessions carry the id as a string. Anything that is not an integer
    cannot name a stored record and yields None.

    Args:
        value: Raw id

    Returns:
        The parsed id, or None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return UserAuthId(value)
    value = value.strip()
    if not value:
        return None
    try:
        return UserAuthId(int(value))
    except ValueError:
        return None
