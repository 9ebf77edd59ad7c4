import logging
import os

import pytest

from imageref.config import ENV_PREFIX
from imageref.logger import logger


def pytest_configure(config):
    """Runs before other tests / imports so the user's imageref settings never leak into them."""
    for k in list(os.environ):
        if k.startswith(f"{ENV_PREFIX}_"):
            os.environ.pop(k)


@pytest.fixture(autouse=True)
def restores_imageref_logger():
    """configure_logger alters the shared logger; put it back after each test."""
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield

    for handler in logger.handlers:
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level or logging.NOTSET)
    logger.propagate = propagate
