"""Default context cache options chosen for a provider and model."""

from typing import Optional

from context_cache.utils import automatic_conversation_cache_id
from models.context_cache import (
    ContextCacheMode,
    ContextCacheOptions,
    ContextCacheStrategy,
    ContextCacheTTL,
)
from models.providers import ProviderType


def default_cache_options(
    provider: ProviderType,
    model_id: str,
    conversation_id: str,
    supports_prompt_caching: Optional[bool] = None,
) -> Optional[ContextCacheOptions]:
    """Return the cache options attached to new requests by default.

    Gemini and Vertex AI get automatic mode too; explicit resources are
    created on the fly by the negotiator when the system prompt is long
    enough.

    Parameters:
        provider (ProviderType): Provider the request goes to.
        model_id (str): Model identifier.
        conversation_id (str): Conversation identifier (a UUID).
        supports_prompt_caching (Optional[bool]): Model capability when
            known; False disables caching.

    Returns:
        Optional[ContextCacheOptions]: Options, None when the provider or
        model has no prompt caching.
    """
    if supports_prompt_caching is False:
        return None

    match provider:
        case ProviderType.OPENAI | ProviderType.OPENAI_WEBSOCKET:
            return ContextCacheOptions(mode=ContextCacheMode.AUTOMATIC)
        case ProviderType.XAI:
            return ContextCacheOptions(
                mode=ContextCacheMode.AUTOMATIC,
                conversation_id=automatic_conversation_cache_id(conversation_id, model_id),
            )
        case ProviderType.ANTHROPIC:
            return ContextCacheOptions(
                mode=ContextCacheMode.AUTOMATIC,
                strategy=ContextCacheStrategy.PREFIX_WINDOW,
                ttl=ContextCacheTTL(),
            )
        case ProviderType.GEMINI | ProviderType.VERTEXAI:
            return ContextCacheOptions(mode=ContextCacheMode.AUTOMATIC)
        case _:
            return None
