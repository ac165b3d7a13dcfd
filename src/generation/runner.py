"""Driver of one streaming generation from request to persisted result."""

import asyncio
from datetime import datetime, UTC
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeAlias

import constants
from context_cache.negotiator import ContextCacheNegotiator, CreateCachedResource
from log import get_logger
from models.deltas import StreamDelta
from models.generation import GenerationOutcome, GenerationRequest, GenerationResult
from streaming.cancellation import CancellationToken
from streaming.session_store import StreamingSession, StreamingSessionStore
from utils.exceptions import GenerationCancelledError, SessionBusyError

logger = get_logger(__name__)

Transport: TypeAlias = Callable[[GenerationRequest], AsyncIterator[StreamDelta]]
PersistenceSink: TypeAlias = Callable[[GenerationResult], Awaitable[None]]


class GenerationRunner:
    """Runs generations and keeps their streaming sessions up to date.

    For every generation the runner opens a streaming session, negotiates
    prompt caching once, folds the provider stream into the session's
    accumulator and finally hands the (possibly partial) result over to
    persistence and ends the session. It is the only writer of the
    accumulators of the sessions it opens.
    """

    def __init__(
        self,
        session_store: StreamingSessionStore,
        negotiator: ContextCacheNegotiator,
        transport: Transport,
        persistence: PersistenceSink,
        persist_empty_results: bool = False,
    ) -> None:
        """Initialize the runner.

        Parameters:
            session_store: Store tracking the streaming sessions.
            negotiator: Context cache negotiator applied to each request.
            transport: Opens the provider stream for a request.
            persistence: Receives the final result of each generation.
            persist_empty_results: Persist generations that produced nothing.
        """
        self._session_store = session_store
        self._negotiator = negotiator
        self._transport = transport
        self._persistence = persistence
        self._persist_empty_results = persist_empty_results

    async def start(
        self,
        conversation_id: str,
        request: GenerationRequest,
        model_label: Optional[str] = None,
        create_cached_resource: Optional[CreateCachedResource] = None,
    ) -> "asyncio.Task[GenerationResult]":
        """Start a generation in the background.

        Parameters:
            conversation_id: Conversation the generation belongs to.
            request: Outgoing generation request.
            model_label: Label of the model shown while streaming.
            create_cached_resource: Creates explicit cache resources.

        Returns:
            asyncio.Task[GenerationResult]: Task resolving to the final result.

        Raises:
            SessionBusyError: If a generation is already streaming for the
            same conversation.
        """
        if self._session_store.is_streaming(conversation_id):
            raise SessionBusyError(conversation_id)

        session = await self._session_store.begin_session(
            conversation_id, model_label=model_label
        )
        token = CancellationToken()
        task = asyncio.create_task(
            self._drive(session, token, request, create_cached_resource)
        )
        await self._session_store.attach_work(conversation_id, token, task=task)
        return task

    async def run(
        self,
        conversation_id: str,
        request: GenerationRequest,
        model_label: Optional[str] = None,
        create_cached_resource: Optional[CreateCachedResource] = None,
    ) -> GenerationResult:
        """Run a generation and wait for its result.

        Raises:
            SessionBusyError: If the conversation is already streaming.
            Exception: Any transport error, after the partial result has
            been persisted.
        """
        task = await self.start(
            conversation_id,
            request,
            model_label=model_label,
            create_cached_resource=create_cached_resource,
        )
        return await task

    async def cancel(self, conversation_id: str) -> None:
        """Request cooperative cancellation of a running generation."""
        await self._session_store.cancel(conversation_id)

    async def _drive(
        self,
        session: StreamingSession,
        token: CancellationToken,
        request: GenerationRequest,
        create_cached_resource: Optional[CreateCachedResource],
    ) -> GenerationResult:
        outcome: GenerationOutcome = constants.GENERATION_OUTCOME_COMPLETED
        error: Optional[str] = None
        pending_error: Optional[BaseException] = None

        try:
            await self._consume(session, token, request, create_cached_resource)
        except GenerationCancelledError:
            outcome = constants.GENERATION_OUTCOME_CANCELLED
            logger.info("Generation cancelled for conversation %s", session.conversation_id)
        except asyncio.CancelledError as e:
            outcome = constants.GENERATION_OUTCOME_CANCELLED
            pending_error = e
        except Exception as e:  # pylint: disable=broad-exception-caught
            outcome = constants.GENERATION_OUTCOME_FAILED
            error = str(e)
            pending_error = e
            logger.error(
                "Generation failed for conversation %s: %s", session.conversation_id, e
            )

        try:
            result = self._build_result(session, outcome, error)
            if not result.is_empty or self._persist_empty_results:
                await self._persistence(result)
            else:
                logger.debug(
                    "Nothing generated for conversation %s, skipping persistence",
                    session.conversation_id,
                )
        except Exception as e:  # pylint: disable=broad-exception-caught
            # the generation error wins over a persistence failure
            if pending_error is None:
                raise
            logger.error(
                "Unable to persist result for conversation %s: %s", session.conversation_id, e
            )
        finally:
            await self._session_store.end_session(session.conversation_id)

        if pending_error is not None:
            raise pending_error
        return result

    async def _consume(
        self,
        session: StreamingSession,
        token: CancellationToken,
        request: GenerationRequest,
        create_cached_resource: Optional[CreateCachedResource],
    ) -> None:
        """Negotiate caching and fold the provider stream into the session."""
        negotiated = await self._negotiator.negotiate(request, create_cached_resource)
        token.raise_if_cancelled()

        stream = self._transport(negotiated)
        try:
            async for delta in stream:
                # a delta received after cancellation is dropped
                token.raise_if_cancelled()
                session.accumulator.apply(delta)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    @staticmethod
    def _build_result(
        session: StreamingSession, outcome: GenerationOutcome, error: Optional[str]
    ) -> GenerationResult:
        accumulator = session.accumulator
        return GenerationResult(
            conversation_id=session.conversation_id,
            model_label=session.model_label,
            outcome=outcome,
            error=error,
            content=accumulator.build_content_parts(),
            tool_calls=accumulator.build_tool_calls(),
            search_activities=accumulator.build_search_activities(),
            started_at=session.started_at,
            completed_at=datetime.now(UTC),
        )
