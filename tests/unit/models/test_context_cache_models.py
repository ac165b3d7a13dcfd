"""Unit tests for context cache option models."""

import pytest
from pydantic import ValidationError
from pytest_subtests import SubTests

from models.context_cache import (
    ContextCacheMode,
    ContextCacheOptions,
    ContextCacheStrategy,
    ContextCacheTTL,
)


@pytest.mark.parametrize(
    "raw,kind,seconds",
    [
        ("default", "provider_default", None),
        ("", "provider_default", None),
        ("Provider_Default", "provider_default", None),
        ("5m", "minutes5", None),
        (" 5MIN ", "minutes5", None),
        ("minutes5", "minutes5", None),
        ("1h", "hour1", None),
        ("60m", "hour1", None),
        ("hour1", "hour1", None),
        ("custom:300", "custom", 300),
        ("custom:0", "provider_default", None),
        ("custom:abc", "provider_default", None),
        ("forever", "provider_default", None),
        (120, "custom", 120),
        (0, "custom", 1),
        (-5, "custom", 1),
        (True, "provider_default", None),
    ],
)
def test_ttl_parsing(raw: object, kind: str, seconds: int | None) -> None:
    """Test the lenient parsing of cache lifetimes."""
    ttl = ContextCacheTTL.model_validate(raw)
    assert ttl.kind == kind
    assert ttl.seconds == seconds


def test_ttl_serialization(subtests: SubTests) -> None:
    """Test the settings and provider forms of cache lifetimes."""
    cases = (
        ("default", "default", None),
        ("5m", "5m", "5m"),
        ("1h", "1h", "1h"),
        ("custom:90", "custom:90", "90s"),
    )
    for raw, serialized, provider_form in cases:
        with subtests.test(msg=raw):
            ttl = ContextCacheTTL.model_validate(raw)
            assert ttl.model_dump() == serialized
            assert ttl.provider_ttl_string == provider_form
            # serialized form parses back to the same lifetime
            assert ContextCacheTTL.model_validate(ttl.model_dump()) == ttl


def test_ttl_explicit_fields_are_checked() -> None:
    """Test that inconsistent explicit fields are rejected."""
    with pytest.raises(ValidationError, match="requires a positive number of seconds"):
        ContextCacheTTL(kind="custom")
    with pytest.raises(ValidationError, match="Only custom cache TTL can specify seconds"):
        ContextCacheTTL(kind="hour1", seconds=10)


def test_options_defaults() -> None:
    """Test default context cache options."""
    options = ContextCacheOptions()
    assert options.mode == ContextCacheMode.AUTOMATIC
    assert options.is_enabled is True
    assert options.strategy is None
    assert options.ttl is None
    assert options.cache_key is None
    assert options.cached_resource_name is None


def test_options_off_mode() -> None:
    """Test that off mode disables caching."""
    assert ContextCacheOptions(mode="off").is_enabled is False


def test_options_ttl_from_string() -> None:
    """Test that options accept the loose TTL forms."""
    options = ContextCacheOptions.model_validate({"ttl": "1h"})
    assert options.ttl == ContextCacheTTL(kind="hour1")
    assert options.model_dump()["ttl"] == "1h"


def test_options_explicit_and_automatic_fields_are_exclusive(
    subtests: SubTests,
) -> None:
    """Test that an explicit resource can not be mixed with automatic fields."""
    cases = {
        "strategy": ContextCacheStrategy.SYSTEM_ONLY,
        "cache_key": "key",
        "conversation_id": "conv",
        "min_tokens_threshold": 1024,
    }
    for field, value in cases.items():
        with subtests.test(msg=field):
            with pytest.raises(ValidationError, match=f"can not be combined with {field}"):
                ContextCacheOptions(
                    mode=ContextCacheMode.EXPLICIT,
                    cached_resource_name="cachedContents/1",
                    **{field: value},
                )


def test_options_negative_threshold() -> None:
    """Test that token thresholds can not be negative."""
    with pytest.raises(ValidationError):
        ContextCacheOptions(min_tokens_threshold=-1)
