import logging
from typing import Optional

from fintrack.config import Settings, get_settings

NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging and silence noisy third-party loggers."""
    settings = settings or get_settings()

    if settings.DEBUG:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
