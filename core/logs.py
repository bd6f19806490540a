from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from core.settings import LOGGING


ROOT_LOGGER = "focusflow"


def _ensure_root() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    if not logger.handlers:
        LOGGING.path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            LOGGING.path,
            maxBytes=LOGGING.max_bytes,
            backupCount=LOGGING.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, LOGGING.level.upper(), logging.INFO))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``focusflow`` logger, installing the file handler once."""
    _ensure_root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


__all__ = ["get_logger", "ROOT_LOGGER"]
