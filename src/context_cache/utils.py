"""Helpers for deriving prompt cache keys and rewriting cached requests."""

import hashlib
import re
from typing import Optional

import constants
from models.content import Message, MessageRole, TextPart, ToolDefinition
from models.context_cache import ContextCacheMode, ContextCacheOptions
from models.generation import GenerationRequest

_DISALLOWED_IDENTIFIER_CHARACTERS = re.compile(r"[^a-z0-9_-]+")


def sha256_hex(text: str) -> str:
    """Return the hex SHA-256 digest of UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def normalized_system_prompt(messages: list[Message]) -> Optional[str]:
    """Return the text of the first system message.

    Text parts are joined with newlines and the result is stripped. Non-text
    parts are ignored.

    Parameters:
        messages (list[Message]): Conversation messages.

    Returns:
        Optional[str]: System prompt text, None when missing or blank.
    """
    system_message = next(
        (message for message in messages if message.role == MessageRole.SYSTEM), None
    )
    if system_message is None:
        return None
    text = "\n".join(
        part.text for part in system_message.content if isinstance(part, TextPart)
    ).strip()
    return text or None


def approximate_token_estimate(text: str) -> int:
    """Roughly estimate the number of tokens in text."""
    if not text:
        return 0
    return max(1, len(text) // constants.CHARACTERS_PER_TOKEN_ESTIMATE)


def normalized_gemini_cached_content_model(model_id: str) -> str:
    """Return the model name as expected by Gemini cached content resources."""
    model = model_id.strip()
    if model.startswith("models/"):
        return model
    return f"models/{model}"


def normalized_vertex_cached_content_model(model_id: str) -> str:
    """Return the model name as expected by Vertex AI cached content resources."""
    model = model_id.strip()
    if model.startswith("publishers/"):
        return model
    if model.startswith("models/"):
        return f"publishers/google/{model}"
    return f"publishers/google/models/{model}"


def tool_signature(tools: list[ToolDefinition]) -> str:
    """Return an order-independent description of the offered tools."""
    return "\n".join(
        sorted(
            f"{tool.name}|{tool.description}|{','.join(tool.parameters.required)}"
            for tool in tools
        )
    )


def automatic_openai_cache_key(
    model_id: str, messages: list[Message], tools: list[ToolDefinition]
) -> str:
    """Compute a stable prompt cache key for key-based providers.

    The key depends only on the model, the system prompt and the tool
    definitions, i.e. on the part of the prompt that stays the same across
    the turns of a conversation.

    Parameters:
        model_id (str): Model identifier.
        messages (list[Message]): Conversation messages.
        tools (list[ToolDefinition]): Tools offered to the model.

    Returns:
        str: Cache key with the automatic key prefix.
    """
    system_text = normalized_system_prompt(messages) or ""
    digest = sha256_hex(
        f"{constants.KEY_BASED_CACHE_FINGERPRINT_PROVIDER}|{model_id}"
        f"|{system_text}|{tool_signature(tools)}"
    )
    return constants.AUTOMATIC_CACHE_KEY_PREFIX + digest[: constants.CACHE_FINGERPRINT_HEX_LENGTH]


def apply_explicit_cache(
    request: GenerationRequest, cached_resource_name: str
) -> Optional[GenerationRequest]:
    """Rewrite a request to use an explicit cache resource.

    The first system message is dropped because the resource already holds
    it, and the cache options switch to explicit mode with every automatic
    field cleared.

    Parameters:
        request (GenerationRequest): Request to rewrite; it is not modified.
        cached_resource_name (str): Name of the remote cache resource.

    Returns:
        Optional[GenerationRequest]: Rewritten copy, None when the request
        has no system message.
    """
    system_index = next(
        (
            index
            for index, message in enumerate(request.messages)
            if message.role == MessageRole.SYSTEM
        ),
        None,
    )
    if system_index is None:
        return None

    messages = list(request.messages)
    del messages[system_index]
    options = ContextCacheOptions(
        mode=ContextCacheMode.EXPLICIT,
        cached_resource_name=cached_resource_name,
    )
    return request.model_copy(update={"messages": messages, "cache_options": options})


def sanitized_cache_identifier(raw: str, max_length: int) -> str:
    """Turn an arbitrary string into a short cache identifier component.

    The value is lowercased, every run of characters other than a-z, 0-9,
    '-' and '_' becomes a single '-', the result is cut to max_length and
    stripped of leading and trailing '-' and '_'.

    Parameters:
        raw (str): Value to sanitize, e.g. a model identifier.
        max_length (int): Maximum length before stripping.

    Returns:
        str: Sanitized identifier, "model" when nothing usable remains.
    """
    collapsed = _DISALLOWED_IDENTIFIER_CHARACTERS.sub("-", raw.lower())
    trimmed = collapsed[:max_length].strip("-_")
    return trimmed or "model"


def automatic_conversation_cache_id(conversation_id: str, model_id: str) -> str:
    """Return the conversation-scoped cache identifier for a model."""
    model_part = sanitized_cache_identifier(
        model_id, constants.CONVERSATION_CACHE_MODEL_PART_MAX_LENGTH
    )
    return f"{constants.AUTOMATIC_CONVERSATION_CACHE_PREFIX}{conversation_id.lower()}-{model_part}"
