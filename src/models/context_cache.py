"""Models for per-request context (prompt) cache options."""

from enum import StrEnum
from typing import Any, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    model_serializer,
    model_validator,
)
from typing_extensions import Self


class ContextCacheMode(StrEnum):
    """Whether and how prompt caching is requested."""

    OFF = "off"
    AUTOMATIC = "automatic"
    EXPLICIT = "explicit"


class ContextCacheStrategy(StrEnum):
    """Which part of the prompt a provider should cache."""

    SYSTEM_ONLY = "system_only"
    SYSTEM_AND_TOOLS = "system_and_tools"
    PREFIX_WINDOW = "prefix_window"


_PROVIDER_DEFAULT_ALIASES = {"", "default", "provider_default", "providerdefault"}
_FIVE_MINUTES_ALIASES = {"5m", "5min", "5mins", "minutes5"}
_ONE_HOUR_ALIASES = {"1h", "60m", "hour1"}
_CUSTOM_PREFIX = "custom:"


class ContextCacheTTL(BaseModel):
    """Requested lifetime of a provider cache entry.

    Accepts the loose forms users type into settings: integers become custom
    seconds, "5m"/"1h" style strings select the well-known lifetimes,
    "custom:N" selects N seconds and anything unrecognised falls back to the
    provider default. Serialized back to "default", "5m", "1h" or "custom:N".
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["provider_default", "minutes5", "hour1", "custom"] = (
        "provider_default"
    )
    seconds: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def parse_raw_value(cls, value: Any) -> Any:
        """Convert the loose int/str forms into model fields."""
        if isinstance(value, bool):
            return {"kind": "provider_default"}
        if isinstance(value, int):
            return {"kind": "custom", "seconds": max(1, value)}
        if not isinstance(value, str):
            return value

        raw = value.strip().lower()
        if raw in _PROVIDER_DEFAULT_ALIASES:
            return {"kind": "provider_default"}
        if raw in _FIVE_MINUTES_ALIASES:
            return {"kind": "minutes5"}
        if raw in _ONE_HOUR_ALIASES:
            return {"kind": "hour1"}
        if raw.startswith(_CUSTOM_PREFIX):
            number = raw[len(_CUSTOM_PREFIX) :].strip()
            if number.isdigit() and int(number) > 0:
                return {"kind": "custom", "seconds": int(number)}
        return {"kind": "provider_default"}

    @model_validator(mode="after")
    def check_seconds(self) -> Self:
        """Check that custom lifetimes carry a positive number of seconds."""
        if self.kind == "custom":
            if self.seconds is None or self.seconds < 1:
                raise ValueError("Custom cache TTL requires a positive number of seconds")
        elif self.seconds is not None:
            raise ValueError("Only custom cache TTL can specify seconds")
        return self

    @model_serializer
    def serialize(self) -> str:
        """Serialize to the settings string form."""
        match self.kind:
            case "minutes5":
                return "5m"
            case "hour1":
                return "1h"
            case "custom":
                return f"custom:{self.seconds}"
            case _:
                return "default"

    @property
    def provider_ttl_string(self) -> Optional[str]:
        """Return the provider wire format, None for the provider default."""
        match self.kind:
            case "minutes5":
                return "5m"
            case "hour1":
                return "1h"
            case "custom":
                return f"{self.seconds}s"
            case _:
                return None


class ContextCacheOptions(BaseModel):
    """Per-request context cache options.

    Explicit and automatic fields are mutually exclusive: a request that
    references an already created cache resource can not carry a strategy,
    cache key, conversation ID or token threshold. Instances are copied and
    adjusted per request, never shared between concurrent requests.
    """

    mode: ContextCacheMode = Field(
        ContextCacheMode.AUTOMATIC,
        title="Mode",
        description="Whether and how prompt caching is requested",
    )

    strategy: Optional[ContextCacheStrategy] = Field(
        None,
        title="Strategy",
        description="Provider-defined caching strategy",
    )

    ttl: Optional[ContextCacheTTL] = Field(
        None,
        title="TTL",
        description="Requested lifetime of the provider cache entry",
    )

    cache_key: Optional[str] = Field(
        None,
        title="Cache key",
        description="Stable prompt cache key for key-based providers",
    )

    conversation_id: Optional[str] = Field(
        None,
        title="Conversation ID",
        description="Conversation-level cache identifier",
    )

    cached_resource_name: Optional[str] = Field(
        None,
        title="Cached resource name",
        description="Name of an explicit provider cache resource",
    )

    min_tokens_threshold: Optional[NonNegativeInt] = Field(
        None,
        title="Minimal tokens threshold",
        description="Minimal prompt size for which caching is requested",
    )

    @model_validator(mode="after")
    def check_explicit_fields(self) -> Self:
        """Check that explicit resource and automatic fields are not mixed."""
        if self.cached_resource_name is None:
            return self
        mixed = [
            name
            for name in (
                "strategy",
                "cache_key",
                "conversation_id",
                "min_tokens_threshold",
            )
            if getattr(self, name) is not None
        ]
        if mixed:
            raise ValueError(
                "cached_resource_name can not be combined with " + ", ".join(mixed)
            )
        return self

    @property
    def is_enabled(self) -> bool:
        """Return True unless caching is switched off."""
        return self.mode != ContextCacheMode.OFF
