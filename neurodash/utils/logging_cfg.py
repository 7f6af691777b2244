"""Centralized logging configuration for neurodash.

Console logging at ``config.LOG_LEVEL``; a rotating file handler is added
when ``config.LOG_PATH`` is set.
"""

import logging
import logging.handlers

from neurodash import config

LOGGER_NAME = "neurodash"


def _build_logger() -> logging.Logger:
    """Create and configure the project logger only once."""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:  # Already initialized
        return logger

    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
    console_handler.setFormatter(
        logging.Formatter("[%(levelname)s] %(asctime)s - %(name)s - %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(console_handler)

    if config.LOG_PATH is not None:
        config.ensure_required_paths()
        file_handler = logging.handlers.RotatingFileHandler(
            config.LOG_PATH,
            maxBytes=3 * 1024 * 1024,  # 3 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Return a child of the project logger bound to ``module_name``.

    Usage:
        from neurodash.utils.logging_cfg import get_logger
        log = get_logger(__name__)
    """
    logger = _build_logger()
    if module_name == LOGGER_NAME:
        return logger
    if module_name.startswith(LOGGER_NAME + "."):
        module_name = module_name[len(LOGGER_NAME) + 1 :]
    return logger.getChild(module_name)


__all__ = ["LOGGER_NAME", "get_logger"]
