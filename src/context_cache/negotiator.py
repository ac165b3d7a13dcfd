"""Rewriting of outgoing requests so providers can reuse cached prompts."""

from typing import Awaitable, Callable, Optional, TypeAlias

from context_cache.registry import CacheKeyRegistry
from context_cache.utils import (
    apply_explicit_cache,
    approximate_token_estimate,
    automatic_openai_cache_key,
    normalized_gemini_cached_content_model,
    normalized_system_prompt,
    normalized_vertex_cached_content_model,
    sha256_hex,
)
import constants
from log import get_logger
from models.config import ContextCacheConfiguration
from models.context_cache import ContextCacheMode, ContextCacheStrategy
from models.generation import GenerationRequest
from models.providers import ProviderFamily, ProviderType, provider_family

logger = get_logger(__name__)

CreateCachedResource: TypeAlias = Callable[[dict], Awaitable[str]]


class ContextCacheNegotiator:
    """Adjusts generation requests for provider-side prompt caching.

    Depending on the provider family the request gets a stable cache key,
    the prefix-window strategy or a reference to an explicitly created cache
    resource. Negotiation never fails: whenever caching can not be arranged
    the request is sent as it is.
    """

    def __init__(
        self,
        registry: CacheKeyRegistry,
        config: Optional[ContextCacheConfiguration] = None,
    ) -> None:
        """Create a negotiator.

        Parameters:
            registry (CacheKeyRegistry): Shared registry of explicit cache
                resources.
            config (Optional[ContextCacheConfiguration]): Thresholds and
                lifetimes; defaults are used when not given.
        """
        self._registry = registry
        self._config = config if config is not None else ContextCacheConfiguration()

    async def negotiate(
        self,
        request: GenerationRequest,
        create_cached_resource: Optional[CreateCachedResource] = None,
    ) -> GenerationRequest:
        """Return the request adjusted for prompt caching.

        Parameters:
            request (GenerationRequest): Outgoing request; never modified.
            create_cached_resource (Optional[CreateCachedResource]): Creates
                an explicit cache resource from a payload and returns its
                name. Explicit providers are left alone without it.

        Returns:
            GenerationRequest: Adjusted copy, or the very same request when
            nothing changes.
        """
        options = request.cache_options
        if not self._config.enabled:
            return request
        if options is not None and options.mode == ContextCacheMode.OFF:
            return request

        family = provider_family(request.provider)
        match family:
            case ProviderFamily.KEY_BASED:
                if options is None or options.cached_resource_name is not None:
                    return request
                cache_key = automatic_openai_cache_key(
                    request.model_id, request.messages, request.tools
                )
                logger.debug("Using prompt cache key %s for %s", cache_key, request.model_id)
                return request.model_copy(
                    update={"cache_options": options.model_copy(update={"cache_key": cache_key})}
                )
            case ProviderFamily.PREFIX_WINDOW:
                if options is None or options.cached_resource_name is not None:
                    return request
                return request.model_copy(
                    update={
                        "cache_options": options.model_copy(
                            update={"strategy": ContextCacheStrategy.PREFIX_WINDOW}
                        )
                    }
                )
            case ProviderFamily.EXPLICIT:
                if options is not None and options.cached_resource_name is not None:
                    return request
                if create_cached_resource is None:
                    logger.debug(
                        "No cache resource factory for %s, sending request as is",
                        request.provider,
                    )
                    return request
                return await self._negotiate_explicit(request, create_cached_resource)
            case _:
                return request

    async def _negotiate_explicit(
        self,
        request: GenerationRequest,
        create_cached_resource: CreateCachedResource,
    ) -> GenerationRequest:
        """Reference an explicit cache resource holding the system prompt.

        The resource is looked up in the registry first and created only on a
        miss; lookup and creation run under the registry key lock, so at most
        one resource is created per fingerprint and lifetime.
        """
        system_text = normalized_system_prompt(request.messages)
        if system_text is None:
            return request
        token_estimate = approximate_token_estimate(system_text)
        if token_estimate < self._config.explicit_min_token_estimate:
            logger.debug(
                "System prompt of about %d tokens is too short for explicit caching",
                token_estimate,
            )
            return request

        if request.provider == ProviderType.VERTEXAI:
            prefix = constants.VERTEX_CACHE_PROVIDER_PREFIX
            normalized_model = normalized_vertex_cached_content_model(request.model_id)
        else:
            prefix = constants.GEMINI_CACHE_PROVIDER_PREFIX
            normalized_model = normalized_gemini_cached_content_model(request.model_id)

        fingerprint = sha256_hex(f"{prefix}|{request.model_id}|{system_text}")
        registry_key = f"{prefix}|{request.model_id}|{fingerprint}"
        display_name = (
            constants.AUTOMATIC_CACHE_DISPLAY_NAME_PREFIX
            + fingerprint[: constants.CACHE_FINGERPRINT_HEX_LENGTH]
        )

        async with self._registry.locked(registry_key):
            resource_name = await self._registry.get(registry_key)
            if resource_name is None:
                payload = {
                    "model": normalized_model,
                    "displayName": display_name,
                    "ttl": f"{self._config.explicit_ttl_seconds}s",
                    "systemInstruction": {"parts": [{"text": system_text}]},
                }
                try:
                    resource_name = await create_cached_resource(payload)
                except Exception as e:  # pylint: disable=broad-exception-caught
                    logger.warning(
                        "Unable to create cache resource %s, sending request without it: %s",
                        display_name,
                        e,
                    )
                    return request
                await self._registry.set(registry_key, resource_name)
                logger.info(
                    "Created cache resource %s for model %s", resource_name, request.model_id
                )

        rewritten = apply_explicit_cache(request, resource_name)
        return rewritten if rewritten is not None else request
