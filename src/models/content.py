"""Models for message content, tool calls and search activities."""

from enum import StrEnum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field


class MessageRole(StrEnum):
    """Role of a message in the conversation."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


class ImageContent(BaseModel):
    """Image content with base64 data or URL."""

    mime_type: str = Field(..., description="MIME type, e.g. image/png")
    data: Optional[str] = Field(None, description="Base64 encoded image data")
    url: Optional[str] = Field(None, description="Remote URL of the image")


class VideoContent(BaseModel):
    """Video content with base64 data or URL."""

    mime_type: str = Field(..., description="MIME type, e.g. video/mp4")
    data: Optional[str] = Field(None, description="Base64 encoded video data")
    url: Optional[str] = Field(None, description="Remote URL of the video")


class ThinkingBlock(BaseModel):
    """Provider reasoning block, optionally closed by a cryptographic signature."""

    text: str = ""
    signature: Optional[str] = None


class RedactedThinkingBlock(BaseModel):
    """Provider-redacted reasoning output kept as an opaque payload."""

    data: str


class TextPart(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    """Image content part."""

    type: Literal["image"] = "image"
    image: ImageContent


class VideoPart(BaseModel):
    """Video content part."""

    type: Literal["video"] = "video"
    video: VideoContent


class ThinkingPart(BaseModel):
    """Reasoning content part."""

    type: Literal["thinking"] = "thinking"
    thinking: ThinkingBlock


class RedactedThinkingPart(BaseModel):
    """Redacted reasoning content part."""

    type: Literal["redacted_thinking"] = "redacted_thinking"
    redacted: RedactedThinkingBlock


ContentPart = Annotated[
    Union[TextPart, ImagePart, VideoPart, ThinkingPart, RedactedThinkingPart],
    Field(discriminator="type"),
]


class ToolCall(BaseModel):
    """Tool call requested by the model.

    Attributes:
        id: Tool call identifier, stable across streamed updates.
        name: Name of the called tool; some providers only send it once.
        arguments: Arguments decoded from the (possibly partial) JSON payload.
        signature: Optional provider signature attached to the call.
    """

    id: str
    name: str = ""
    arguments: dict[str, Any] = Field(default_factory=dict)
    signature: Optional[str] = None


class SearchActivityStatus(StrEnum):
    """Well-known statuses of provider-native web-search activity.

    Statuses reported by providers that are not listed here are kept as
    plain strings on the activity.
    """

    IN_PROGRESS = "in_progress"
    SEARCHING = "searching"
    COMPLETED = "completed"
    FAILED = "failed"


class SearchActivity(BaseModel):
    """Normalized provider-native web-search activity."""

    id: str
    type: str = ""
    status: str = SearchActivityStatus.IN_PROGRESS
    arguments: dict[str, Any] = Field(default_factory=dict)
    output_index: Optional[int] = None
    sequence_number: Optional[int] = None

    def merged(self, newer: "SearchActivity") -> "SearchActivity":
        """Merge a newer update of the same activity into this one.

        Arguments are overlaid key by key with the newer values winning; the
        type is only replaced by a non-empty one and the positional fields are
        only replaced when the newer update carries them.

        Parameters:
            newer (SearchActivity): Later update for the same activity ID.

        Returns:
            SearchActivity: New merged activity; neither input is modified.
        """
        return SearchActivity(
            id=self.id,
            type=newer.type or self.type,
            status=newer.status,
            arguments={**self.arguments, **newer.arguments},
            output_index=(
                newer.output_index
                if newer.output_index is not None
                else self.output_index
            ),
            sequence_number=(
                newer.sequence_number
                if newer.sequence_number is not None
                else self.sequence_number
            ),
        )


class Message(BaseModel):
    """Message in the conversation."""

    role: MessageRole
    content: list[ContentPart] = Field(default_factory=list)
    tool_calls: Optional[list[ToolCall]] = None
    search_activities: Optional[list[SearchActivity]] = None


class ParameterSchema(BaseModel):
    """JSON schema describing tool parameters."""

    type: str = "object"
    properties: dict[str, Any] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class ToolDefinition(BaseModel):
    """Tool offered to the model."""

    name: str
    description: str = ""
    parameters: ParameterSchema = Field(default_factory=ParameterSchema)
