"""Provider-side prompt cache negotiation.

Outgoing requests are adjusted so that providers can reuse already processed
prompt prefixes. Explicitly created cache resources are remembered in a
process-wide CacheKeyRegistry.
"""

from context_cache.defaults import default_cache_options
from context_cache.negotiator import ContextCacheNegotiator, CreateCachedResource
from context_cache.registry import CacheKeyRegistry

__all__ = [
    "CacheKeyRegistry",
    "ContextCacheNegotiator",
    "CreateCachedResource",
    "default_cache_options",
]
