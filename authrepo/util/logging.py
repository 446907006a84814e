"""Standard library logging for the auth repository.

Most events go through Logfire; plain loggers are used by the protocol
adapters, which have no span context of their own. Neither path may carry
passwords, password hashes, digest responses or provider tokens.
"""

import logging
import sys

from authrepo.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Driver loggers; SQL statement logging is controlled by DATABASE__ECHO
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite")


def setup_logging(settings: Settings) -> None:
    """Route authrepo and driver logs to stdout.

    Debug settings lower the authrepo loggers to DEBUG; driver loggers
    stay at WARNING either way.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
        force=True,  # Override any existing configuration
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("authrepo").setLevel(level)

    get_logger(__name__).info(
        "Logging configured: environment=%s, level=%s",
        settings.environment,
        logging.getLevelName(level),
    )


def get_logger(name: str) -> logging.Logger:
    """Logger for an authrepo module, usually called with ``__name__``."""
    return logging.getLogger(name)
