"""Models for generation requests and their final results."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

import constants
from models.content import ContentPart, Message, SearchActivity, ToolCall, ToolDefinition
from models.context_cache import ContextCacheOptions
from models.providers import ProviderType


class GenerationRequest(BaseModel):
    """Outgoing generation request as seen by the caching layer.

    Attributes:
        provider: Provider the request is sent to.
        model_id: Model identifier used for the generation itself.
        messages: Conversation history, optionally starting with a system message.
        tools: Tools offered to the model.
        cache_options: Context cache options; None when the provider gets none.
    """

    provider: ProviderType
    model_id: str
    messages: list[Message] = Field(default_factory=list)
    tools: list[ToolDefinition] = Field(default_factory=list)
    cache_options: Optional[ContextCacheOptions] = None


GenerationOutcome = Literal["completed", "cancelled", "failed"]


class GenerationResult(BaseModel):
    """Final (possibly partial) output of one generation, handed to persistence."""

    conversation_id: str
    model_label: Optional[str] = None
    outcome: GenerationOutcome = constants.GENERATION_OUTCOME_COMPLETED
    error: Optional[str] = None
    content: list[ContentPart] = Field(default_factory=list)
    tool_calls: list[ToolCall] = Field(default_factory=list)
    search_activities: list[SearchActivity] = Field(default_factory=list)
    started_at: datetime
    completed_at: datetime

    @property
    def is_empty(self) -> bool:
        """Return True when nothing was generated."""
        return not (self.content or self.tool_calls or self.search_activities)
