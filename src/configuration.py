"""Configuration loader."""

import logging
from typing import Any, Optional

import yaml

from context_cache.negotiator import ContextCacheNegotiator
from context_cache.registry import CacheKeyRegistry
from generation.runner import GenerationRunner, PersistenceSink, Transport
from models.config import (
    Configuration,
    ContextCacheConfiguration,
    LoggingConfiguration,
    StreamingConfiguration,
)
from streaming.session_store import StreamingSessionStore

logger = logging.getLogger(__name__)


class LogicError(Exception):
    """Error in application logic."""


class AppConfig:
    """Singleton class to load and store the configuration."""

    _instance = None

    def __new__(cls, *args: Any, **kwargs: Any) -> "AppConfig":
        """Create a new instance of the class."""
        if not isinstance(cls._instance, cls):
            cls._instance = super().__new__(cls, *args, **kwargs)
        return cls._instance

    def __init__(self) -> None:
        """Initialize the class instance.

        Sets placeholders for the loaded configuration and the lazily-created
        process-wide runtime resources (cache key registry, context cache
        negotiator and streaming session store).
        """
        self._configuration: Optional[Configuration] = None
        self._cache_key_registry: Optional[CacheKeyRegistry] = None
        self._negotiator: Optional[ContextCacheNegotiator] = None
        self._session_store: Optional[StreamingSessionStore] = None

    def load_configuration(self, filename: str) -> None:
        """Load configuration from YAML file.

        Parameters:
            filename (str): Path to the YAML configuration file to load.
        """
        with open(filename, encoding="utf-8") as fin:
            config_dict = yaml.safe_load(fin) or {}
            logger.info("Loaded configuration: %s", config_dict)
            self.init_from_dict(config_dict)

    def init_from_dict(self, config_dict: dict[Any, Any]) -> None:
        """Initialize configuration from a dictionary.

        Parameters:
            config_dict (dict[Any, Any]): Mapping of configuration values
            (typically parsed from YAML). Runtime resources built from the
            previous configuration are dropped and rebuilt on next access.
        """
        # clear cached values when configuration changes
        self._cache_key_registry = None
        self._negotiator = None
        self._session_store = None
        # now it is possible to re-read configuration
        self._configuration = Configuration(**config_dict)

    @property
    def configuration(self) -> Configuration:
        """Return the whole configuration.

        Returns:
            Configuration: The loaded configuration object.

        Raises:
            LogicError: If the configuration has not been loaded.
        """
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration

    @property
    def context_cache_configuration(self) -> ContextCacheConfiguration:
        """Return context cache configuration.

        Raises:
            LogicError: If the configuration has not been loaded.
        """
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.context_cache

    @property
    def streaming_configuration(self) -> StreamingConfiguration:
        """Return streaming configuration.

        Raises:
            LogicError: If the configuration has not been loaded.
        """
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.streaming

    @property
    def logging_configuration(self) -> LoggingConfiguration:
        """Return logging configuration.

        Raises:
            LogicError: If the configuration has not been loaded.
        """
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.logging

    @property
    def cache_key_registry(self) -> CacheKeyRegistry:
        """Return the process-wide registry of explicit cache resources.

        The registry is created on first access.

        Returns:
            CacheKeyRegistry: Registry bounded and timed as configured.

        Raises:
            LogicError: If the configuration has not been loaded.
        """
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        if self._cache_key_registry is None:
            cache_config = self._configuration.context_cache
            self._cache_key_registry = CacheKeyRegistry(
                max_entries=cache_config.registry_max_entries,
                ttl_seconds=cache_config.client_ttl_seconds,
            )
        return self._cache_key_registry

    @property
    def negotiator(self) -> ContextCacheNegotiator:
        """Return the context cache negotiator sharing the process-wide registry.

        Raises:
            LogicError: If the configuration has not been loaded.
        """
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        if self._negotiator is None:
            self._negotiator = ContextCacheNegotiator(
                self.cache_key_registry, self._configuration.context_cache
            )
        return self._negotiator

    @property
    def session_store(self) -> StreamingSessionStore:
        """Return the process-wide streaming session store.

        Raises:
            LogicError: If the configuration has not been loaded.
        """
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        if self._session_store is None:
            self._session_store = StreamingSessionStore()
        return self._session_store

    def generation_runner(
        self, transport: Transport, persistence: PersistenceSink
    ) -> GenerationRunner:
        """Create a generation runner wired to the process-wide resources.

        Parameters:
            transport (Transport): Opens the provider stream for a request.
            persistence (PersistenceSink): Receives the final results.

        Returns:
            GenerationRunner: Runner sharing the session store and negotiator.

        Raises:
            LogicError: If the configuration has not been loaded.
        """
        return GenerationRunner(
            self.session_store,
            self.negotiator,
            transport,
            persistence,
            persist_empty_results=self.streaming_configuration.persist_empty_results,
        )


configuration: AppConfig = AppConfig()
