"""Accumulator folding streamed response deltas into ordered content."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from models.content import (
    ContentPart,
    ImageContent,
    ImagePart,
    RedactedThinkingBlock,
    RedactedThinkingPart,
    SearchActivity,
    TextPart,
    ThinkingBlock,
    ThinkingPart,
    ToolCall,
    VideoContent,
    VideoPart,
)
from models.deltas import (
    ImageDelta,
    RedactedThinkingDelta,
    SearchActivityDelta,
    StreamDelta,
    TextDelta,
    ThinkingDelta,
    ToolCallDelta,
    VideoDelta,
)


class PartKind(Enum):
    """Kind of segment store a part reference points into."""

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    THINKING = "thinking"


@dataclass(frozen=True, slots=True)
class PartReference:
    """Position of one content part in its typed segment store."""

    kind: PartKind
    index: int


@dataclass(frozen=True, slots=True)
class RedactedReference:
    """Redacted reasoning part; it is never merged and carries its payload."""

    redacted: RedactedThinkingBlock


@dataclass(slots=True)
class ThinkingSegment:
    """Reasoning block that is still open for more text or its signature."""

    chunks: list[str] = field(default_factory=list)
    signature: Optional[str] = None

    @property
    def text(self) -> str:
        """Return the block text."""
        return "".join(self.chunks)


class ResponseAccumulator:
    """Accumulates streamed response parts of one generation attempt.

    Text, media and reasoning deltas are folded into one ordered sequence of
    part references, the only source of truth for content ordering. Tool calls
    and search activities are kept in separate collections ordered by first
    appearance; consumers join them with the content themselves.

    Exactly one writer (the loop receiving the provider stream) may call the
    mutating methods. The build methods never mutate state and may be called
    at any time, e.g. once per rendered frame.
    """

    def __init__(self) -> None:
        """Create an empty accumulator."""
        self._part_refs: list[PartReference | RedactedReference] = []
        self._text_segments: list[list[str]] = []
        self._image_segments: list[ImageContent] = []
        self._video_segments: list[VideoContent] = []
        self._thinking_segments: list[ThinkingSegment] = []
        # kind and index of the segment the next delta may extend
        self._open_kind: Optional[PartKind] = None
        self._open_index = -1
        self._tool_calls_by_id: dict[str, ToolCall] = {}
        self._tool_call_order: list[str] = []
        self._search_activities_by_id: dict[str, SearchActivity] = {}
        self._search_activity_order: list[str] = []

    def apply(self, delta: StreamDelta) -> None:
        """Fold one stream delta into the accumulated state.

        Parameters:
            delta (StreamDelta): Delta received from the provider transport.
        """
        match delta:
            case TextDelta():
                self.append_text(delta.text)
            case ImageDelta():
                self.append_image(delta.image)
            case VideoDelta():
                self.append_video(delta.video)
            case ThinkingDelta() | RedactedThinkingDelta():
                self.append_thinking(delta)
            case ToolCallDelta():
                self.upsert_tool_call(delta.tool_call)
            case SearchActivityDelta():
                self.upsert_search_activity(delta.activity)

    def append_text(self, delta: str) -> None:
        """Append a text delta, extending the current text run if one is open.

        Parameters:
            delta (str): Text fragment; empty fragments are ignored.
        """
        if not delta:
            return
        if self._open_kind is PartKind.TEXT:
            self._text_segments[self._open_index].append(delta)
            return
        self._text_segments.append([delta])
        self._open_part(PartKind.TEXT, len(self._text_segments) - 1)

    def append_image(self, image: ImageContent) -> None:
        """Append an image as a new part; media parts are never merged."""
        self._image_segments.append(image)
        self._open_part(PartKind.IMAGE, len(self._image_segments) - 1)

    def append_video(self, video: VideoContent) -> None:
        """Append a video as a new part; media parts are never merged."""
        self._video_segments.append(video)
        self._open_part(PartKind.VIDEO, len(self._video_segments) - 1)

    def append_thinking(self, delta: ThinkingDelta | RedactedThinkingDelta) -> None:
        """Append a reasoning delta.

        A block is the run of reasoning deltas sharing one signature. The
        signature may arrive together with the text or as a trailing delta
        with empty text after the block's text, so:

        1. empty text with a signature differing from the open block's one
           (re)signs the open block;
        2. a delta whose signature equals the open block's one (both may be
           missing) extends the open block;
        3. anything else starts a new block.

        Redacted reasoning always becomes a new opaque part.

        Parameters:
            delta: Reasoning text/signature delta or redacted payload.
        """
        if isinstance(delta, RedactedThinkingDelta):
            self._part_refs.append(
                RedactedReference(redacted=RedactedThinkingBlock(data=delta.data))
            )
            self._open_kind = None
            self._open_index = -1
            return

        open_block = self._open_thinking_segment()
        if open_block is not None:
            if not delta.text and delta.signature is not None:
                if open_block.signature != delta.signature:
                    open_block.signature = delta.signature
                return
            if open_block.signature == delta.signature:
                if delta.text:
                    open_block.chunks.append(delta.text)
                return

        self._thinking_segments.append(
            ThinkingSegment(
                chunks=[delta.text] if delta.text else [],
                signature=delta.signature,
            )
        )
        self._open_part(PartKind.THINKING, len(self._thinking_segments) - 1)

    def upsert_tool_call(self, call: ToolCall) -> None:
        """Record a tool call or merge an update into its first occurrence.

        Arguments of the update overlay the existing ones key by key, so
        partially streamed arguments get refined. The signature is replaced
        only by a present one and the name only by a non-empty one.

        Parameters:
            call (ToolCall): New tool call or update of a known one.
        """
        existing = self._tool_calls_by_id.get(call.id)
        if existing is None:
            self._tool_call_order.append(call.id)
            self._tool_calls_by_id[call.id] = call
            return

        self._tool_calls_by_id[call.id] = ToolCall(
            id=call.id,
            name=call.name or existing.name,
            arguments={**existing.arguments, **call.arguments},
            signature=call.signature if call.signature is not None else existing.signature,
        )

    def upsert_search_activity(self, activity: SearchActivity) -> None:
        """Record a search activity or merge an update into the known one."""
        existing = self._search_activities_by_id.get(activity.id)
        if existing is None:
            self._search_activity_order.append(activity.id)
            self._search_activities_by_id[activity.id] = activity
        else:
            self._search_activities_by_id[activity.id] = existing.merged(activity)

    def build_content_parts(self) -> list[ContentPart]:
        """Resolve the part references into concrete content parts.

        Returns:
            list[ContentPart]: Content parts in stream order.
        """
        parts: list[ContentPart] = []
        for ref in self._part_refs:
            match ref:
                case RedactedReference(redacted=redacted):
                    parts.append(RedactedThinkingPart(redacted=redacted))
                case PartReference(kind=PartKind.TEXT, index=index):
                    parts.append(TextPart(text="".join(self._text_segments[index])))
                case PartReference(kind=PartKind.IMAGE, index=index):
                    parts.append(ImagePart(image=self._image_segments[index]))
                case PartReference(kind=PartKind.VIDEO, index=index):
                    parts.append(VideoPart(video=self._video_segments[index]))
                case PartReference(kind=PartKind.THINKING, index=index):
                    segment = self._thinking_segments[index]
                    parts.append(
                        ThinkingPart(
                            thinking=ThinkingBlock(
                                text=segment.text, signature=segment.signature
                            )
                        )
                    )
        return parts

    def build_tool_calls(self) -> list[ToolCall]:
        """Return tool calls in order of first appearance."""
        return [self._tool_calls_by_id[call_id] for call_id in self._tool_call_order]

    def build_search_activities(self) -> list[SearchActivity]:
        """Return search activities in order of first appearance."""
        return [
            self._search_activities_by_id[activity_id]
            for activity_id in self._search_activity_order
        ]

    @property
    def is_empty(self) -> bool:
        """Return True when nothing has been accumulated yet."""
        return not (self._part_refs or self._tool_call_order or self._search_activity_order)

    @property
    def text_content(self) -> str:
        """Return all accumulated text runs concatenated."""
        return "".join("".join(segment) for segment in self._text_segments)

    @property
    def thinking_content(self) -> str:
        """Return all accumulated reasoning text concatenated."""
        return "".join(segment.text for segment in self._thinking_segments)

    def _open_part(self, kind: PartKind, index: int) -> None:
        self._part_refs.append(PartReference(kind=kind, index=index))
        self._open_kind = kind
        self._open_index = index

    def _open_thinking_segment(self) -> Optional[ThinkingSegment]:
        if self._open_kind is PartKind.THINKING:
            return self._thinking_segments[self._open_index]
        return None
