from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV: str = "GRAPHLY_LOG_LEVEL"
LOG_FORMAT: str = "%(asctime)s - %(levelname)5s | %(name)s | %(message)s"


def setup_logger(name: str = "graphly", level_str: str | None = None) -> logging.Logger:
    """Attach one console handler to *name*.

    The level comes from *level_str*, else ``$GRAPHLY_LOG_LEVEL``, else INFO.
    Repeated calls do not stack handlers.
    """
    level_str = level_str or os.environ.get(LOG_LEVEL_ENV, "INFO")
    log_level = getattr(logging, level_str.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(log_level)

    logger.propagate = True
    return logger
