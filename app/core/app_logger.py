import logging
from typing import Optional

from app.core.config import settings

LOGGER_NAME = "school"


def setup_logging() -> logging.Logger:
    """Configure the package logger once. Handlers are left to the process (uvicorn/gunicorn)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    logger.propagate = True
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    base = logging.getLogger(LOGGER_NAME)
    return base.getChild(name) if name else base
