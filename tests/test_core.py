import importlib
import io
import json
import logging

import pytest
import structlog
from pydantic import ValidationError

from initializable.core.config import Settings, get_settings, reset_settings
from initializable.core.exceptions import (
    InitializableException,
    InitializationTimeout,
    ForcedFailure,
    ReinitializationInterrupt,
)
from initializable import Initializable
from initializable.core.logging import LogContext, get_logger, setup_logging


# ============================================================================
# Config
# ============================================================================

def test_default_settings():
    settings = get_settings()

    assert settings.INIT_TIMEOUT_SECONDS == 50.0
    assert settings.FORCE_READY_MESSAGE == "Interrupt initialization"
    assert settings.LOG_FORMAT == "console"


def test_settings_singleton_and_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("INITIALIZABLE_LOG_LEVEL", "debug")
    reset_settings()

    second = get_settings()
    assert second is not first
    assert second.LOG_LEVEL == "DEBUG"


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(INIT_TIMEOUT_SECONDS=0)


def test_bad_environment_does_not_break_import(monkeypatch):
    monkeypatch.setenv("INITIALIZABLE_INIT_TIMEOUT_SECONDS", "-1")

    import initializable.core.config as config
    importlib.reload(config)

    with pytest.raises(ValidationError):
        config.get_settings()


# ============================================================================
# Exceptions
# ============================================================================

def test_timeout_error_details():
    error = InitializationTimeout("CacheService", 2.5)

    assert isinstance(error, InitializableException)
    assert isinstance(error, TimeoutError)
    assert str(error) == "Timeout on initialization provider CacheService after 2.5s"
    assert error.to_dict() == {
        "error_code": "INIT_TIMEOUT",
        "message": "Timeout on initialization provider CacheService after 2.5s",
        "details": {"owner": "CacheService", "timeout_seconds": 2.5},
    }


def test_forced_failure_carries_message():
    error = ForcedFailure("shutdown requested")

    assert str(error) == "shutdown requested"
    assert error.error_code == "FORCED_FAILURE"
    assert error.details == {}


def test_reinitialization_interrupt_names_owner():
    error = ReinitializationInterrupt("CacheService", 3)

    assert "CacheService" in error.message
    assert error.details["generation"] == 3


# ============================================================================
# Logging
# ============================================================================

def test_get_logger_namespaces():
    logger = get_logger("lifecycle")
    assert logger is not None
    assert get_logger() is not None


def test_log_context_binds_and_restores():
    structlog.contextvars.bind_contextvars(service="outer")

    with LogContext(service="cache", attempt=2):
        context = structlog.contextvars.get_contextvars()
        assert context["service"] == "cache"
        assert context["attempt"] == 2

    context = structlog.contextvars.get_contextvars()
    assert context["service"] == "outer"
    assert "attempt" not in context
    structlog.contextvars.clear_contextvars()


@pytest.mark.parametrize("log_format", ["json", "console"])
def test_setup_logging_uses_overrides(reset_structlog, log_format):
    stream = io.StringIO()

    logger = setup_logging(level="debug", log_format=log_format, stream=stream)
    logger.info("sample_event", answer=42)

    output = stream.getvalue()
    assert "logging_configured" in output
    assert "sample_event" in output
    assert logging_level("initializable") == "DEBUG"


@pytest.mark.asyncio
async def test_lifecycle_events_carry_owner_and_generation(reset_structlog):
    stream = io.StringIO()
    setup_logging(level="INFO", log_format="json", stream=stream)

    seen = {}

    async def record_context():
        seen.update(structlog.contextvars.get_contextvars())

    service = Initializable(on_init=record_context)
    assert await service.is_ready() is True

    assert seen["lifecycle_owner"] == "Initializable"
    assert seen["lifecycle_generation"] == 0
    assert "lifecycle_owner" not in structlog.contextvars.get_contextvars()

    entries = [json.loads(line) for line in stream.getvalue().splitlines()]
    completed = [e for e in entries if e["event"] == "initialization_completed"]
    assert len(completed) == 1
    assert completed[0]["owner"] == "Initializable"
    assert completed[0]["lifecycle_generation"] == 0
    assert completed[0]["logger"] == "initializable.lifecycle"


def logging_level(name: str) -> str:
    return logging.getLevelName(logging.getLogger(name).level)
