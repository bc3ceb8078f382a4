"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import logging

import pytest

from jobwarden.config import reset_default_values
from jobwarden.config.runtime import DEFAULTS_FILE_ENV
from jobwarden.config.settings import (
    DEBUG_ENV,
    DEVICE_URI_ENV,
    FORWARD_COMMAND_ENV,
    GRACE_SECONDS_ENV,
    LOG_DIR_ENV,
    SERVERBIN_ENV,
)
from tests.helpers.supervisor_fakes import FakeClock

_SUPERVISOR_ENV = (
    DEVICE_URI_ENV,
    SERVERBIN_ENV,
    FORWARD_COMMAND_ENV,
    GRACE_SECONDS_ENV,
    LOG_DIR_ENV,
    DEBUG_ENV,
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Strip supervisor variables and point defaults at a file that does not exist."""
    for name in _SUPERVISOR_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(DEFAULTS_FILE_ENV, str(tmp_path / "no-defaults.json"))
    reset_default_values()
    yield
    reset_default_values()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
