"""Logging configuration helpers."""

import logging


def configure_logging(level: str = 'INFO') -> None:
    """Configure the titensor logger with a single stream handler."""
    logger = logging.getLogger('titensor')
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(levelname)s: %(name)s: %(message)s'))
    logger.addHandler(handler)
    logger.propagate = False
