"""Shared fixtures."""

import pytest

from envbind.config import reset_config
from envbind.config.settings import CONFIG_PATH_ENV_VAR


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Every test starts from default settings."""
    monkeypatch.delenv(CONFIG_PATH_ENV_VAR, raising=False)
    reset_config()
    yield
    reset_config()
