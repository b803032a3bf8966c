"""Shared pytest fixtures."""
import logging

import pytest


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Drop handlers added during a test so none outlives the stream it was bound to."""
    package_logger = logging.getLogger("pocket_calculator")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in package_logger.handlers[:]:
        if handler not in handlers:
            package_logger.removeHandler(handler)
    package_logger.setLevel(level)
