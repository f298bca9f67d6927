"""Shared pytest setup."""

import logging

import pytest


@pytest.fixture(autouse=True)
def quiet_titensor_logger():
    """Keep CLI runs from binding a stream handler to pytest's captured stderr."""
    logger = logging.getLogger('titensor')
    handler = logging.NullHandler()
    logger.addHandler(handler)
    yield
    logger.removeHandler(handler)
