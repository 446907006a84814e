"""Collections used by the auth repository and the indexes they carry."""

from authrepo.domain.model import ApiKey, UserAuth, UserAuthDetails
from authrepo.domain.repository import CollectionSpec

USER_AUTH = CollectionSpec("user_auth", UserAuth, auto_key=True)
USER_AUTH_DETAILS = CollectionSpec("user_auth_details", UserAuthDetails, auto_key=True)
API_KEY = CollectionSpec("api_key", ApiKey)

# (fields, unique) per collection
INDEXES: dict[str, list[tuple[tuple[str, ...], bool]]] = {
    USER_AUTH.name: [
        (("user_name",), True),
        (("email",), True),
    ],
    USER_AUTH_DETAILS.name: [
        (("user_auth_id",), False),
        (("provider", "user_id"), True),
    ],
    API_KEY.name: [
        (("user_auth_id",), False),
    ],
}
