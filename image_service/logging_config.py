import logging.config

from image_service.config import settings


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once for API and worker processes."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"handlers": ["console"], "level": (level or settings.log_level).upper()},
            # broker clients log every reconnect at INFO
            "loggers": {
                "aiormq": {"level": "WARNING"},
                "aio_pika": {"level": "WARNING"},
            },
        }
    )
