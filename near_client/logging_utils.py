from __future__ import annotations

import logging

LOGGER_NAME = "near_client"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach one console handler to the package logger.

    Safe to call more than once; the level is updated but no second handler is added.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    if not any(getattr(handler, "_near_client_handler", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._near_client_handler = True
        logger.addHandler(handler)

    return logger
