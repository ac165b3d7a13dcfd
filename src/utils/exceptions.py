"""Exceptions raised by the generation core and its collaborators."""

from typing import Optional


class ProviderError(Exception):
    """Error reported by a provider transport while streaming a response.

    Attributes:
        code: Provider specific error code, if any.
        message: Human readable error description.
    """

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        """Initialize the error with a message and optional provider code."""
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        """Return the message prefixed by the provider code when known."""
        if self.code:
            return f"Provider error ({self.code}): {self.message}"
        return self.message


class CacheCreationError(Exception):
    """Remote cache resource could not be created."""


class GenerationCancelledError(Exception):
    """Generation was cancelled cooperatively."""


class SessionBusyError(Exception):
    """A generation is already streaming for the conversation."""

    def __init__(self, conversation_id: str) -> None:
        """Initialize the error for the given conversation."""
        super().__init__(f"Generation already in progress for {conversation_id}")
        self.conversation_id = conversation_id
