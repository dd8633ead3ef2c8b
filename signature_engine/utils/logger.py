"""Logging configuration for the signing service."""

import logging
import sys

from signature_engine.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str | None = None, level: str | None = None) -> logging.Logger:
    """Configure a stdout logger once and return it."""
    logger = logging.getLogger(name or "signature_engine")
    level_name = (level or settings.log_level).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    return logger


def component_logger(component: str) -> logging.Logger:
    """Child of the service logger, e.g. ``signature_engine.stores``."""
    return logger.getChild(component)


# Default logger instance
logger = setup_logger("signature_engine")
