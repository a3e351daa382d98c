from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV_VAR = "ROOMCRAWLER_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR")


def default_log_level() -> str:
    level = os.getenv(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return level if level in LOG_LEVEL_CHOICES else DEFAULT_LOG_LEVEL


def configure_logging(level: str | None = None) -> None:
    """Send library logging to stderr so stdout stays reserved for game text."""
    logging.basicConfig(level=(level or default_log_level()).upper(), format=LOG_FORMAT, force=True)
