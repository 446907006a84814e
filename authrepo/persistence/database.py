"""Database engine management for the SQL document store."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from authrepo.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Create async database engine.

    Args:
        settings: Application settings with database URL

    Returns:
        Configured async engine
    """
    options = {
        "echo": settings.database.echo or settings.debug,  # Log SQL in debug mode
        "pool_pre_ping": True,  # Verify connections before using
    }
    if not settings.database.url.startswith("sqlite"):
        options["pool_size"] = settings.database.pool_size
        options["max_overflow"] = settings.database.max_overflow

    return create_async_engine(settings.database.url, **options)
