import logging

import pytest
import structlog

from initializable.core.config import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    library_logger = logging.getLogger("initializable")
    library_logger.handlers.clear()
    library_logger.setLevel(logging.NOTSET)
