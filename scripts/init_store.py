#!/usr/bin/env python3
"""Create the auth collections and indexes with Logfire error tracking.

Run before starting services with AUTH__CREATE_MISSING_COLLECTIONS=false.
"""

import asyncio
import sys

import logfire

from authrepo.config import Settings
from authrepo.persistence.database import create_engine
from authrepo.persistence.schema import AuthSchema
from authrepo.persistence.store import SqlDocumentStore
from authrepo.util.logging import setup_logging
from authrepo.util.observability import configure_logfire, instrument_sqlalchemy


async def init_store(settings: Settings) -> list[str]:
    """Create missing collections on the configured database.

    Returns:
        Names of the collections that were created
    """
    engine = create_engine(settings)
    instrument_sqlalchemy(engine)
    try:
        return await AuthSchema(SqlDocumentStore(engine)).create_missing_collections()
    finally:
        await engine.dispose()


def main() -> int:
    """Initialize the store and log any errors to Logfire."""
    settings = Settings()

    setup_logging(settings)
    configure_logfire(settings)

    try:
        logfire.info("Initializing auth store")
        created = asyncio.run(init_store(settings))
        logfire.info("Auth store ready", created=created)
        return 0

    except Exception as e:
        logfire.error(
            "Auth store initialization failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the deployment step fails
        raise


if __name__ == "__main__":
    sys.exit(main())
