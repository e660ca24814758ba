import logging
import os
from typing import Optional


ROOT_LOGGER = "gifflow"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def _level() -> int:
    # Read here rather than from settings, which logs on import
    name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger for a gifflow module, e.g. get_logger("gifflow.github.api").

    Each name gets its own stderr handler the first time it is requested;
    records do not bubble up to the root logger, so uvicorn's handlers
    never print them twice.
    """
    logger = logging.getLogger(name or ROOT_LOGGER)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.setLevel(_level())
    logger.addHandler(handler)
    logger.propagate = False
    return logger
