"""Models for incremental stream events emitted by provider transports."""

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from models.content import (
    ImageContent,
    SearchActivity,
    ToolCall,
    VideoContent,
)


class TextDelta(BaseModel):
    """Fragment of assistant text."""

    type: Literal["text"] = "text"
    text: str = ""


class ImageDelta(BaseModel):
    """Complete generated image."""

    type: Literal["image"] = "image"
    image: ImageContent


class VideoDelta(BaseModel):
    """Complete generated video."""

    type: Literal["video"] = "video"
    video: VideoContent


class ThinkingDelta(BaseModel):
    """Fragment of reasoning text and/or the signature of its block.

    Providers send the signature either together with the text or as a
    trailing delta with empty text once the block is closed.
    """

    type: Literal["thinking"] = "thinking"
    text: str = ""
    signature: Optional[str] = None


class RedactedThinkingDelta(BaseModel):
    """Opaque provider-redacted reasoning payload."""

    type: Literal["redacted_thinking"] = "redacted_thinking"
    data: str


class ToolCallDelta(BaseModel):
    """New or updated tool call."""

    type: Literal["tool_call"] = "tool_call"
    tool_call: ToolCall


class SearchActivityDelta(BaseModel):
    """New or updated web-search activity."""

    type: Literal["search_activity"] = "search_activity"
    activity: SearchActivity


StreamDelta = Annotated[
    Union[
        TextDelta,
        ImageDelta,
        VideoDelta,
        ThinkingDelta,
        RedactedThinkingDelta,
        ToolCallDelta,
        SearchActivityDelta,
    ],
    Field(discriminator="type"),
]

_STREAM_DELTA_ADAPTER: TypeAdapter[StreamDelta] = TypeAdapter(StreamDelta)


def parse_stream_delta(raw: str | bytes | dict[str, Any]) -> StreamDelta:
    """Parse one stream delta from its JSON or dictionary form.

    Parameters:
        raw: JSON document (str or bytes) or already decoded dictionary.

    Returns:
        StreamDelta: The validated delta.

    Raises:
        pydantic.ValidationError: If the payload is not a known delta.
        json.JSONDecodeError: If `raw` is not valid JSON.
    """
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    return _STREAM_DELTA_ADAPTER.validate_python(raw)
