"""SQLAlchemy table definitions backing the SQL document store.

One table per collection; column names match record field names so rows map
straight onto the domain models. Tables and indexes are created on demand by
the store rather than by migrations.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.types import TypeDecorator


class UtcDateTime(TypeDecorator):
    """Timezone-aware datetime that always round-trips as UTC.

    SQLite drops the offset on storage; values read back are tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# Metadata object for all tables
metadata = MetaData()


def _profile_columns() -> list[Column]:
    return [
        Column("display_name", String(255), nullable=True),
        Column("first_name", String(255), nullable=True),
        Column("last_name", String(255), nullable=True),
        Column("full_name", String(255), nullable=True),
        Column("company", String(255), nullable=True),
        Column("phone_number", String(64), nullable=True),
        Column("birth_date", UtcDateTime, nullable=True),
        Column("birth_date_raw", String(64), nullable=True),
        Column("address", Text, nullable=True),
        Column("address2", Text, nullable=True),
        Column("city", String(255), nullable=True),
        Column("state", String(255), nullable=True),
        Column("country", String(255), nullable=True),
        Column("culture", String(32), nullable=True),
        Column("gender", String(32), nullable=True),
        Column("language", String(32), nullable=True),
        Column("mail_address", Text, nullable=True),
        Column("nickname", String(255), nullable=True),
        Column("postal_code", String(32), nullable=True),
        Column("time_zone", String(64), nullable=True),
    ]


# ============================================================================
# USER AUTH (canonical user identity)
# ============================================================================
user_auth_table = Table(
    "user_auth",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_name", String(255), nullable=True),
    Column("email", String(255), nullable=True),
    Column("primary_email", String(255), nullable=True),
    Column("password_hash", String(255), nullable=True),
    Column("salt", String(255), nullable=True),
    Column("digest_ha1_hash", String(64), nullable=True),
    *_profile_columns(),
    Column("roles", JSON, nullable=False),
    Column("permissions", JSON, nullable=False),
    Column("ref_id", Integer, nullable=True),
    Column("ref_id_str", String(255), nullable=True),
    Column("meta", JSON, nullable=False),
    Column("invalid_login_attempts", Integer, nullable=False, default=0),
    Column("last_login_attempt", UtcDateTime, nullable=True),
    Column("locked_date", UtcDateTime, nullable=True),
    Column("created_date", UtcDateTime, nullable=True),
    Column("modified_date", UtcDateTime, nullable=True),
)

Index("ix_user_auth_user_name", user_auth_table.c.user_name, unique=True)
Index("ix_user_auth_email", user_auth_table.c.email, unique=True)

# ============================================================================
# USER AUTH DETAILS (external login links)
# ============================================================================
user_auth_details_table = Table(
    "user_auth_details",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # Plain reference, no foreign key: links are deleted explicitly
    Column("user_auth_id", Integer, nullable=True),
    Column("provider", String(50), nullable=False),
    Column("user_id", String(255), nullable=False),
    Column("user_name", String(255), nullable=True),
    Column("email", String(255), nullable=True),
    *_profile_columns(),
    Column("access_token", Text, nullable=True),
    Column("access_token_secret", Text, nullable=True),
    Column("refresh_token", Text, nullable=True),
    Column("refresh_token_expiry", UtcDateTime, nullable=True),
    Column("request_token", Text, nullable=True),
    Column("request_token_secret", Text, nullable=True),
    Column("items", JSON, nullable=False),
    Column("created_date", UtcDateTime, nullable=True),
    Column("modified_date", UtcDateTime, nullable=True),
)

Index("ix_user_auth_details_user_auth_id", user_auth_details_table.c.user_auth_id)
Index(
    "ix_user_auth_details_provider_user_id",
    user_auth_details_table.c.provider,
    user_auth_details_table.c.user_id,
    unique=True,
)

# ============================================================================
# API KEY
# ============================================================================
api_key_table = Table(
    "api_key",
    metadata,
    Column("id", String(255), primary_key=True),
    Column("user_auth_id", String(255), nullable=False),
    Column("environment", String(64), nullable=True),
    Column("key_type", String(64), nullable=True),
    Column("notes", Text, nullable=True),
    Column("ref_id", Integer, nullable=True),
    Column("ref_id_str", String(255), nullable=True),
    Column("meta", JSON, nullable=False),
    Column("created_date", UtcDateTime, nullable=False),
    Column("expiry_date", UtcDateTime, nullable=True),
    Column("cancelled_date", UtcDateTime, nullable=True),
)

Index("ix_api_key_user_auth_id", api_key_table.c.user_auth_id)

# Collection name -> table
TABLES: dict[str, Table] = {
    table.name: table
    for table in (user_auth_table, user_auth_details_table, api_key_table)
}
