"""Shared test fixtures."""

import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logging setup done by the code under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
