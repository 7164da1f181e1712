import logging
import logging.config

from .settings import LoggingSettings

LOGGER_NAME = "delugeweb"


def configure_logging(settings: LoggingSettings) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": settings.format}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "default",
                }
            },
            "loggers": {
                LOGGER_NAME: {
                    "level": settings.level,
                    "handlers": ["stdout"],
                    "propagate": False,
                }
            },
        }
    )


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)
