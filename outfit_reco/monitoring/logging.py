"""Logging configuration shared by the API process and the Celery workers."""

from __future__ import annotations

import logging

from outfit_reco.config.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# HTTP clients log every provider call at INFO
_NOISY_LOGGERS = ("httpx", "openai")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger; ``level`` overrides ``LOG_LEVEL``."""

    name = (level or get_settings().log_level).upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=LOG_FORMAT)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
