"""Logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from config.settings import AppConfig

# HTTP client libraries that log each connection or request at INFO/DEBUG
HTTP_LOGGERS = ("urllib3", "requests", "httpx")


def _level(name: str, default: int) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(config: AppConfig) -> logging.Logger:
    """Configure root logging once and return the application logger.

    ``config.log_level`` applies to the application, ``config.http_log_level``
    to the HTTP client libraries, which are chatty at the default level.
    """
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=_level(config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_dir / "journal_image_studio.log", encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
    http_level = _level(config.http_log_level, logging.WARNING)
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)
    return logging.getLogger("journal_image_studio")
