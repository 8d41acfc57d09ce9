"""
Logging configuration.

Modules log through ``logging.getLogger(__name__)`` and pass structured
context with ``extra={...}``. The API process installs a console handler
with ``configure_logging``; Celery workers keep Celery's own handlers and
formats and only apply ``quiet_library_loggers``.
"""

import logging
import logging.config

from lumaprod.core.config import get_settings

LOG_FORMAT = "[%(asctime)s: %(levelname)s/%(name)s] %(message)s"

# Libraries that are too chatty at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


def quiet_library_loggers() -> None:
    """Raise third-party loggers to WARNING."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging with a single console handler.

    Args:
        level: Log level override (defaults to settings.log_level)
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"handlers": ["console"], "level": level},
        }
    )
    quiet_library_loggers()
