"""Testing utilities for in-process gateway simulations."""

from .fake_backend import (
    ChunkedByteStream,
    FakeBackend,
    FakeReply,
    build_message_response,
    build_message_stream_events,
    sse_event,
)

__all__ = [
    "ChunkedByteStream",
    "FakeBackend",
    "FakeReply",
    "build_message_response",
    "build_message_stream_events",
    "sse_event",
]
