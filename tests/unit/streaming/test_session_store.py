"""Unit tests for StreamingSessionStore."""

import asyncio

import pytest

from models.content import TextPart
from streaming.cancellation import CancellationToken
from streaming.session_store import StreamingSessionStore


class TestStreamingSessionStore:
    """Tests for StreamingSessionStore."""

    @pytest.fixture
    def store(self) -> StreamingSessionStore:
        """Create a fresh session store for each test."""
        return StreamingSessionStore()

    @pytest.mark.asyncio
    async def test_unknown_conversation_is_not_streaming(
        self, store: StreamingSessionStore
    ) -> None:
        """Test queries for a conversation without a session."""
        assert store.is_streaming("c1") is False
        assert store.current_state("c1") is None
        assert store.model_label("c1") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_begin_session_is_idempotent(self, store: StreamingSessionStore) -> None:
        """Test that beginning a session twice returns the same session."""
        first = await store.begin_session("c1", model_label="GPT")
        second = await store.begin_session("c1")

        assert first is second
        assert store.current_state("c1") is first.accumulator
        assert store.model_label("c1") == "GPT"
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_begin_session_backfills_model_label(
        self, store: StreamingSessionStore
    ) -> None:
        """Test that a later known label replaces a missing one."""
        await store.begin_session("c1")
        assert store.model_label("c1") is None

        await store.begin_session("c1", model_label="Claude")
        assert store.model_label("c1") == "Claude"

    @pytest.mark.asyncio
    async def test_end_session(self, store: StreamingSessionStore) -> None:
        """Test that an ended session is no longer streaming."""
        await store.begin_session("c1")
        assert store.is_streaming("c1") is True

        await store.end_session("c1")
        assert store.is_streaming("c1") is False
        assert store.current_state("c1") is None

    @pytest.mark.asyncio
    async def test_end_session_twice(self, store: StreamingSessionStore) -> None:
        """Test that ending a session repeatedly does not raise."""
        await store.begin_session("c1")
        await store.end_session("c1")
        await store.end_session("c1")
        await store.end_session("never-started")
        assert store.is_streaming("c1") is False

    @pytest.mark.asyncio
    async def test_attach_work_after_end_is_ignored(
        self, store: StreamingSessionStore
    ) -> None:
        """Test that attaching work to an ended session creates nothing."""
        await store.begin_session("c1")
        await store.end_session("c1")

        await store.attach_work("c1", CancellationToken())
        assert store.is_streaming("c1") is False
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_cancel_signals_token_and_keeps_session(
        self, store: StreamingSessionStore
    ) -> None:
        """Test that cancellation only signals the attached token."""
        token = CancellationToken()
        session = await store.begin_session("c1")
        await store.attach_work("c1", token)
        assert session.cancel_handle is token

        await store.cancel("c1")

        assert token.cancelled is True
        assert store.is_streaming("c1") is True

    @pytest.mark.asyncio
    async def test_cancel_without_work(self, store: StreamingSessionStore) -> None:
        """Test that cancelling without attached work or session is a no-op."""
        await store.cancel("unknown")
        await store.begin_session("c1")
        await store.cancel("c1")
        assert store.is_streaming("c1") is True

    @pytest.mark.asyncio
    async def test_one_session_per_conversation(self, store: StreamingSessionStore) -> None:
        """Test that a conversation never has more than one session."""
        first = await store.begin_session("c1", model_label="A")
        second = await store.begin_session("c1", model_label="B")
        other = await store.begin_session("c2")

        assert first is second
        assert first is not other
        assert len(store) == 2
        assert store.model_label("c1") == "B"

        await store.end_session("c1")
        assert store.is_streaming("c1") is False
        assert store.current_state("c1") is None
        assert store.is_streaming("c2") is True
        assert store.current_state("c2") is other.accumulator

    @pytest.mark.asyncio
    async def test_cancellation_scenario(self, store: StreamingSessionStore) -> None:
        """Test that deltas arriving after cancellation are not accumulated."""
        token = CancellationToken()
        session = await store.begin_session("c1")
        await store.attach_work("c1", token)

        async def consume(deltas: asyncio.Queue) -> None:
            while True:
                delta = await deltas.get()
                if token.cancelled:
                    break
                session.accumulator.append_text(delta)

        queue: asyncio.Queue = asyncio.Queue()
        consumer = asyncio.create_task(consume(queue))
        for delta in ("one ", "two ", "three"):
            await queue.put(delta)
        while not queue.empty():
            await asyncio.sleep(0)
        await asyncio.sleep(0)

        await store.cancel("c1")
        await queue.put(" four")
        await consumer

        captured = session.accumulator.build_content_parts()
        await store.end_session("c1")

        assert captured == [TextPart(text="one two three")]
        assert store.is_streaming("c1") is False
