"""Provider identifiers and their prompt caching families."""

from enum import Enum, StrEnum


class ProviderType(StrEnum):
    """Supported LLM provider APIs."""

    OPENAI = "openai"
    OPENAI_WEBSOCKET = "openaiWebSocket"
    CODEX_APP_SERVER = "codexAppServer"
    OPENAI_COMPATIBLE = "openaiCompatible"
    CLOUDFLARE_AI_GATEWAY = "cloudflareAIGateway"
    OPENROUTER = "openrouter"
    ANTHROPIC = "anthropic"
    PERPLEXITY = "perplexity"
    GROQ = "groq"
    COHERE = "cohere"
    MISTRAL = "mistral"
    DEEPINFRA = "deepinfra"
    XAI = "xai"
    DEEPSEEK = "deepseek"
    FIREWORKS = "fireworks"
    CEREBRAS = "cerebras"
    GEMINI = "gemini"
    VERTEXAI = "vertexai"


class ProviderFamily(Enum):
    """How a provider exposes prompt caching.

    KEY_BASED providers cache by an exact client-supplied key, PREFIX_WINDOW
    providers cache the growing conversation prefix automatically and
    EXPLICIT providers need an out-of-band cache resource.
    """

    KEY_BASED = "key_based"
    PREFIX_WINDOW = "prefix_window"
    EXPLICIT = "explicit"
    UNSUPPORTED = "unsupported"


_PROVIDER_FAMILIES: dict[ProviderType, ProviderFamily] = {
    ProviderType.OPENAI: ProviderFamily.KEY_BASED,
    ProviderType.OPENAI_WEBSOCKET: ProviderFamily.KEY_BASED,
    ProviderType.ANTHROPIC: ProviderFamily.PREFIX_WINDOW,
    ProviderType.GEMINI: ProviderFamily.EXPLICIT,
    ProviderType.VERTEXAI: ProviderFamily.EXPLICIT,
}


def provider_family(provider: ProviderType) -> ProviderFamily:
    """Return the prompt caching family of the given provider.

    Parameters:
        provider (ProviderType): Provider identifier.

    Returns:
        ProviderFamily: The family; UNSUPPORTED for providers without
        client-driven prompt caching.
    """
    return _PROVIDER_FAMILIES.get(provider, ProviderFamily.UNSUPPORTED)
