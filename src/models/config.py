"""Model with generation core configuration."""

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveFloat,
    PositiveInt,
    model_validator,
)
from typing_extensions import Self

import constants


class ConfigurationBase(BaseModel):
    """Base class for all configuration models that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


class ContextCacheConfiguration(ConfigurationBase):
    """Context (prompt) cache negotiation configuration.

    Providers are able to reuse already processed prompt prefixes. Depending
    on the provider this is driven by a client-supplied cache key, by the
    provider itself or by explicitly created cache resources. The explicit
    resources are created only for system prompts that are long enough to
    make the extra round trip worthwhile.
    """

    enabled: bool = Field(
        True,
        title="Enabled",
        description="When disabled, outgoing requests are never rewritten for caching",
    )

    explicit_min_token_estimate: PositiveInt = Field(
        constants.EXPLICIT_CACHE_MIN_TOKEN_ESTIMATE,
        title="Explicit cache threshold",
        description="Minimal estimated token count of a system prompt for which "
        "an explicit cache resource is created",
    )

    explicit_ttl_seconds: PositiveInt = Field(
        constants.EXPLICIT_CACHE_TTL_SECONDS,
        title="Explicit cache TTL",
        description="Server-side lifetime of explicit cache resources in seconds",
    )

    client_ttl_ratio: PositiveFloat = Field(
        constants.EXPLICIT_CACHE_CLIENT_TTL_RATIO,
        title="Client TTL ratio",
        description="Part of the server-side lifetime for which the resource "
        "name is reused locally",
    )

    min_client_ttl_seconds: PositiveInt = Field(
        constants.EXPLICIT_CACHE_MIN_CLIENT_TTL_SECONDS,
        title="Minimal client TTL",
        description="Lower bound of the local lifetime of registry entries in seconds",
    )

    registry_max_entries: PositiveInt = Field(
        constants.DEFAULT_CACHE_REGISTRY_MAX_ENTRIES,
        title="Registry size",
        description="Maximum number of cache resource names kept in memory",
    )

    @model_validator(mode="after")
    def check_context_cache_configuration(self) -> Self:
        """Check context cache configuration."""
        if self.client_ttl_ratio > 1:
            raise ValueError(
                "client_ttl_ratio must not exceed 1, otherwise expired cache "
                "resources would be referenced"
            )
        return self

    @property
    def client_ttl_seconds(self) -> float:
        """Return the local lifetime of newly created cache resource names."""
        return max(
            float(self.min_client_ttl_seconds),
            self.explicit_ttl_seconds * self.client_ttl_ratio,
        )


class StreamingConfiguration(ConfigurationBase):
    """Streaming sessions configuration."""

    persist_empty_results: bool = Field(
        False,
        title="Persist empty results",
        description="Hand generations that produced nothing over to persistence too",
    )


class LoggingConfiguration(ConfigurationBase):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        constants.DEFAULT_LOG_LEVEL,
        title="Log level",
        description="Level of messages logged by the generation core",
    )


class Configuration(ConfigurationBase):
    """Global generation core configuration."""

    name: str = Field(
        "jin",
        title="Application name",
        description="Name of the application embedding the generation core.",
    )

    context_cache: ContextCacheConfiguration = Field(
        default_factory=ContextCacheConfiguration,
        title="Context cache configuration",
        description="This section contains configuration of provider-side "
        "prompt caching negotiation.",
    )

    streaming: StreamingConfiguration = Field(
        default_factory=StreamingConfiguration,
        title="Streaming configuration",
        description="This section contains configuration of streaming sessions.",
    )

    logging: LoggingConfiguration = Field(
        default_factory=LoggingConfiguration,
        title="Logging configuration",
        description="Logging configuration",
    )

    def dump(self, filename: str = "configuration.json") -> None:
        """Dump actual configuration into JSON file."""
        with open(filename, "w", encoding="utf-8") as fout:
            fout.write(self.model_dump_json(indent=4))
