"""Logger setup shared by all TaskDesk services."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from core.settings import LOGGING

ROOT_LOGGER = "taskdesk"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _ensure_root() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    if LOGGING.enabled and not logger.handlers:
        LOGGING.path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            LOGGING.path,
            maxBytes=LOGGING.max_bytes,
            backupCount=LOGGING.backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(LOGGING.level)
    return logger


def get_logger(name: str) -> logging.Logger:
    _ensure_root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


__all__ = ["get_logger", "ROOT_LOGGER"]
