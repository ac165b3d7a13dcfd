"""Streaming sessions and accumulation of streamed responses.

This package provides:
- ResponseAccumulator folding stream deltas into ordered content
- StreamingSessionStore tracking generations that are streaming right now
- CancellationToken used for cooperative cancellation
"""

from streaming.accumulator import ResponseAccumulator
from streaming.cancellation import CancellationToken
from streaming.session_store import StreamingSession, StreamingSessionStore

__all__ = [
    "ResponseAccumulator",
    "CancellationToken",
    "StreamingSession",
    "StreamingSessionStore",
]
