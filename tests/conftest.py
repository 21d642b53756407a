#!/usr/bin/env python3

"""
Shared pytest fixtures.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logger so streams do not leak between tests."""
    yield
    logger = logging.getLogger("iocsift")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
