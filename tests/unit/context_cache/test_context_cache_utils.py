"""Unit tests for context cache helper functions."""

import pytest
from pytest_subtests import SubTests

from context_cache.utils import (
    apply_explicit_cache,
    approximate_token_estimate,
    automatic_openai_cache_key,
    normalized_system_prompt,
    sanitized_cache_identifier,
    sha256_hex,
    tool_signature,
)
from models.content import (
    ImageContent,
    ImagePart,
    Message,
    MessageRole,
    ParameterSchema,
    TextPart,
    ToolDefinition,
)
from models.context_cache import ContextCacheMode, ContextCacheOptions
from models.generation import GenerationRequest
from models.providers import ProviderType


def test_sha256_hex() -> None:
    """Test the digest of a known value."""
    assert (
        sha256_hex("abc")
        == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_normalized_system_prompt(subtests: SubTests) -> None:
    """Test extraction of the system prompt text."""
    with subtests.test(msg="No system message"):
        messages = [Message(role=MessageRole.USER, content=[TextPart(text="hi")])]
        assert normalized_system_prompt(messages) is None

    with subtests.test(msg="Text parts are joined and stripped"):
        messages = [
            Message(
                role=MessageRole.SYSTEM,
                content=[
                    TextPart(text="  first"),
                    ImagePart(image=ImageContent(mime_type="image/png", data="eA==")),
                    TextPart(text="second \n"),
                ],
            ),
            Message(role=MessageRole.SYSTEM, content=[TextPart(text="ignored")]),
        ]
        assert normalized_system_prompt(messages) == "first\nsecond"

    with subtests.test(msg="Blank system message"):
        messages = [Message(role=MessageRole.SYSTEM, content=[TextPart(text="  ")])]
        assert normalized_system_prompt(messages) is None


@pytest.mark.parametrize(
    "text,expected",
    [("", 0), ("a", 1), ("abc", 1), ("abcd", 1), ("abcdefgh", 2), ("x" * 8192, 2048)],
)
def test_approximate_token_estimate(text: str, expected: int) -> None:
    """Test the rough token estimate."""
    assert approximate_token_estimate(text) == expected


def test_tool_signature_is_order_independent() -> None:
    """Test that tool order does not change the signature."""
    search = ToolDefinition(
        name="search",
        description="Search",
        parameters=ParameterSchema(required=["query", "limit"]),
    )
    fetch = ToolDefinition(name="fetch", description="Fetch a page")

    assert tool_signature([search, fetch]) == tool_signature([fetch, search])
    assert tool_signature([search, fetch]) == "fetch|Fetch a page|\nsearch|Search|query,limit"


def test_automatic_openai_cache_key_depends_on_tools() -> None:
    """Test that offered tools are part of the cache key."""
    messages = [Message(role=MessageRole.SYSTEM, content=[TextPart(text="sys")])]
    without_tools = automatic_openai_cache_key("gpt-5", messages, [])
    with_tools = automatic_openai_cache_key(
        "gpt-5", messages, [ToolDefinition(name="search")]
    )

    assert without_tools != with_tools
    assert without_tools == "jin-prefix-" + sha256_hex("openai|gpt-5|sys|")[:24]


def test_apply_explicit_cache() -> None:
    """Test that the first system message is replaced by the resource."""
    request = GenerationRequest(
        provider=ProviderType.GEMINI,
        model_id="gemini-2.5-pro",
        messages=[
            Message(role=MessageRole.USER, content=[TextPart(text="hi")]),
            Message(role=MessageRole.SYSTEM, content=[TextPart(text="sys")]),
        ],
        cache_options=ContextCacheOptions(cache_key="key"),
    )

    rewritten = apply_explicit_cache(request, "cachedContents/1")

    assert rewritten is not None
    assert [message.role for message in rewritten.messages] == [MessageRole.USER]
    assert rewritten.cache_options == ContextCacheOptions(
        mode=ContextCacheMode.EXPLICIT, cached_resource_name="cachedContents/1"
    )
    assert len(request.messages) == 2


def test_apply_explicit_cache_without_system_message() -> None:
    """Test that nothing is rewritten without a system message."""
    request = GenerationRequest(provider=ProviderType.GEMINI, model_id="m")
    assert apply_explicit_cache(request, "cachedContents/1") is None


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("GPT-4o", "gpt-4o"),
        ("grok 4 / fast", "grok-4-fast"),
        ("models/gemini_2.5", "models-gemini_2-5"),
        ("--Claude--", "claude"),
        ("!!!", "model"),
        ("", "model"),
        ("a" * 40, "a" * 32),
    ],
)
def test_sanitized_cache_identifier(raw: str, expected: str) -> None:
    """Test sanitizing of cache identifier components."""
    assert sanitized_cache_identifier(raw, 32) == expected
