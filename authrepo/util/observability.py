"""Logfire setup for the auth repository.

Services open a span per write path and emit one event per outcome, with
record ids as attributes:

    with logfire.span("credential_service.update_user_auth", user_auth_id=user.id):
        ...
    logfire.info("User auth updated", user_auth_id=saved.id, password_changed=True)

Attributes never include passwords, hashes, salts, digest responses or
provider tokens. Login failures carry a ``reason`` instead.
"""

from importlib.metadata import PackageNotFoundError, version

import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from authrepo.config import Settings


def _service_version() -> str:
    try:
        return version("authrepo")
    except PackageNotFoundError:
        return "0.0.0"


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire console output and, optionally, cloud export.

    Export is decided by OBSERVABILITY__SEND_TO_LOGFIRE when set, and
    otherwise by whether OBSERVABILITY__LOGFIRE_TOKEN is present.

    Args:
        settings: Application settings
    """
    observability = settings.observability
    if observability.send_to_logfire is not None:
        send_to_logfire = observability.send_to_logfire
    else:
        send_to_logfire = bool(observability.logfire_token)

    config_kwargs = {
        "service_name": "authrepo",
        "service_version": _service_version(),
        "environment": settings.environment,
        "send_to_logfire": send_to_logfire,
        "console": logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    }
    if observability.logfire_token:
        config_kwargs["token"] = observability.logfire_token

    logfire.configure(**config_kwargs)

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        has_token=bool(observability.logfire_token),
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace every statement the SQL document store issues on ``engine``."""
    logfire.instrument_sqlalchemy(
        engine=engine.sync_engine,
        enable_commenter=True,  # Add SQL comments with span context
    )
    logfire.info("SQLAlchemy instrumented", dialect=engine.dialect.name)
