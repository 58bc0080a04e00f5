"""Logging setup for processes embedding the OAuth service client."""

import logging

from oauthdb.config import Settings, get_settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", '
    '"logger": "%(name)s", "message": "%(message)s"}'
)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings.

    Args:
        settings: Client settings (uses default if not provided)
    """
    settings = settings or get_settings()
    log_level = settings.log_level.upper()

    if settings.log_format == "json":
        logging.basicConfig(level=log_level, format=JSON_FORMAT)
    else:
        logging.basicConfig(level=log_level, format=TEXT_FORMAT)

    logging.getLogger("oauthdb").debug(
        "Logging configured: level=%s format=%s",
        log_level,
        settings.log_format,
    )
