"""
Logging setup.

Module loggers are created with logging.getLogger(__name__); this installs
the root handler and format once per process. The root level follows the
most recent call, so an app built with a different LOG_LEVEL takes effect.
"""

import logging

from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(settings: Settings) -> None:
    """Install the root handler once and apply the configured level."""
    global _configured
    if not _configured:
        logging.basicConfig(format=LOG_FORMAT)
        # pymongo logs every heartbeat at DEBUG
        logging.getLogger("pymongo").setLevel(logging.WARNING)
        _configured = True
    logging.getLogger().setLevel(settings.log_level.upper())
