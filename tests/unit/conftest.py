"""Shared pytest fixtures for unit tests."""

import pytest

from configuration import AppConfig


@pytest.fixture(name="minimal_config")
def minimal_config_fixture() -> AppConfig:
    """Create a minimal AppConfig with default sections.

    This fixture provides a valid configuration that can be used in tests
    that don't need specific configuration values.

    Returns:
        AppConfig: AppConfig instance initialized with default sections.
    """
    cfg = AppConfig()
    cfg.init_from_dict({"name": "test"})
    return cfg
