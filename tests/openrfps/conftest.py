"""Shared fixtures for openrfps tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_openrfps_logger():
    """Drop handlers installed by CLI tests so they don't outlive capture."""
    yield
    logger = logging.getLogger("openrfps")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
