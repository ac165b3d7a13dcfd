"""In-memory registry of generations that are currently streaming."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Optional

from log import get_logger
from streaming.accumulator import ResponseAccumulator
from streaming.cancellation import CancellationToken

logger = get_logger(__name__)


@dataclass
class StreamingSession:
    """One active streaming generation.

    Attributes:
        conversation_id: Conversation the generation belongs to.
        accumulator: Live accumulated response, written only by the
            generation loop.
        model_label: Label of the model shown while streaming.
        cancel_handle: Token used to request cooperative cancellation.
        task: Task running the generation, when attached.
        started_at: When the session was created.
    """

    conversation_id: str
    accumulator: ResponseAccumulator = field(default_factory=ResponseAccumulator)
    model_label: Optional[str] = None
    cancel_handle: Optional[CancellationToken] = None
    task: Optional[asyncio.Task] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class StreamingSessionStore:
    """Tracks streaming sessions, at most one per conversation.

    A session lives from begin_session to end_session; cancellation only asks
    the generation to stop and the generation ends its own session.

    Mutations are serialized by one lock, queries are lock-free point-in-time
    reads usable from rendering code.
    """

    def __init__(self) -> None:
        """Initialize an empty session store."""
        logger.debug("Initializing StreamingSessionStore")
        self._sessions: dict[str, StreamingSession] = {}
        self._lock = asyncio.Lock()

    async def begin_session(
        self, conversation_id: str, model_label: Optional[str] = None
    ) -> StreamingSession:
        """Create a session or return the existing one.

        Calling this repeatedly is safe. A known model label is never
        replaced by a missing one.

        Args:
            conversation_id: Conversation identifier.
            model_label: Label of the generating model, if known.

        Returns:
            The active session.
        """
        async with self._lock:
            session = self._sessions.get(conversation_id)
            if session is None:
                session = StreamingSession(
                    conversation_id=conversation_id, model_label=model_label
                )
                self._sessions[conversation_id] = session
                logger.info("Streaming session started for conversation %s", conversation_id)
            elif model_label is not None:
                session.model_label = model_label
            return session

    async def attach_work(
        self,
        conversation_id: str,
        cancel_handle: CancellationToken,
        task: Optional[asyncio.Task] = None,
    ) -> None:
        """Associate the cancellable generation work with a session.

        Nothing happens when the session has already ended.

        Args:
            conversation_id: Conversation identifier.
            cancel_handle: Token the generation loop checks.
            task: Task running the generation.
        """
        async with self._lock:
            session = self._sessions.get(conversation_id)
            if session is None:
                logger.debug(
                    "Not attaching work, no session for conversation %s", conversation_id
                )
                return
            session.cancel_handle = cancel_handle
            session.task = task

    async def cancel(self, conversation_id: str) -> None:
        """Request cooperative cancellation of a session's generation.

        The session itself stays registered until the generation ends it.
        """
        async with self._lock:
            session = self._sessions.get(conversation_id)
            if session is None or session.cancel_handle is None:
                logger.debug("Nothing to cancel for conversation %s", conversation_id)
                return
            session.cancel_handle.cancel()
            logger.info("Cancellation requested for conversation %s", conversation_id)

    async def end_session(self, conversation_id: str) -> None:
        """Remove a session; ending an unknown session is a no-op."""
        async with self._lock:
            if self._sessions.pop(conversation_id, None) is None:
                logger.debug(
                    "Attempted to end non-existent session for conversation %s",
                    conversation_id,
                )
                return
            logger.info("Streaming session ended for conversation %s", conversation_id)

    def is_streaming(self, conversation_id: str) -> bool:
        """Check whether a generation is streaming for the conversation."""
        return conversation_id in self._sessions

    def current_state(self, conversation_id: str) -> Optional[ResponseAccumulator]:
        """Return the live accumulator of a session, None when not streaming."""
        session = self._sessions.get(conversation_id)
        return session.accumulator if session is not None else None

    def model_label(self, conversation_id: str) -> Optional[str]:
        """Return the model label of a session, None when unknown."""
        session = self._sessions.get(conversation_id)
        return session.model_label if session is not None else None

    def __len__(self) -> int:
        """Return the number of active sessions."""
        return len(self._sessions)
