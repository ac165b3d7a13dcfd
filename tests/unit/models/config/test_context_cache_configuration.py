"""Unit tests for ContextCacheConfiguration model."""

import pytest
from pydantic import ValidationError

import constants
from models.config import ContextCacheConfiguration


def test_context_cache_configuration_defaults() -> None:
    """Test the default context cache configuration."""
    c = ContextCacheConfiguration()
    assert c.enabled is True
    assert c.explicit_min_token_estimate == constants.EXPLICIT_CACHE_MIN_TOKEN_ESTIMATE
    assert c.explicit_ttl_seconds == 3600
    assert c.client_ttl_ratio == 0.9
    assert c.min_client_ttl_seconds == 60
    assert c.registry_max_entries == constants.DEFAULT_CACHE_REGISTRY_MAX_ENTRIES


def test_client_ttl_seconds() -> None:
    """Test the local lifetime of registry entries."""
    assert ContextCacheConfiguration().client_ttl_seconds == pytest.approx(3240.0)
    # the lower bound wins for short server-side lifetimes
    c = ContextCacheConfiguration(explicit_ttl_seconds=30)
    assert c.client_ttl_seconds == 60.0


def test_client_ttl_ratio_above_one() -> None:
    """Test that the local lifetime can not exceed the remote one."""
    with pytest.raises(ValidationError, match="client_ttl_ratio must not exceed 1"):
        ContextCacheConfiguration(client_ttl_ratio=1.5)


def test_non_positive_values() -> None:
    """Test that sizes and lifetimes must be positive."""
    with pytest.raises(ValidationError):
        ContextCacheConfiguration(explicit_ttl_seconds=0)
    with pytest.raises(ValidationError):
        ContextCacheConfiguration(registry_max_entries=0)
    with pytest.raises(ValidationError):
        ContextCacheConfiguration(client_ttl_ratio=0)


def test_unknown_field() -> None:
    """Test that unknown fields are rejected."""
    with pytest.raises(ValidationError, match="Extra inputs are not permitted"):
        ContextCacheConfiguration(foo="bar")
