"""Shared fixtures."""

import logging

import pytest

from pipethrough.logging_config import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo setup_logging() so caplog keeps seeing package records."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    factory = logging.getLogRecordFactory()
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
    logging.setLogRecordFactory(factory)
