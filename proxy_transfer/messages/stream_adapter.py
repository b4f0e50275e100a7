"""Stream adapter for converting Anthropic Messages SSE to OpenAI Chat Completions SSE.

Anthropic Messages Events (input):
    event: message_start
    data: {"type":"message_start","message":{...}}

    event: content_block_delta
    data: {"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"Hello"}}

    event: message_stop
    data: {"type":"message_stop"}

OpenAI Chat Completion Events (output):
    data: {"id":"chatcmpl-stream","object":"chat.completion.chunk",...,
           "choices":[{"index":0,"delta":{"content":"Hello"},"finish_reason":null}]}
    data: {...,"choices":[{"index":0,"delta":{},"finish_reason":"stop"}]}
    data: [DONE]

Only content_block_delta and message_stop produce output. Every other event
type is ignored.
"""

import logging
import time
from typing import Any, AsyncIterator, Optional

import httpx

from ..core.exceptions import ProxyError, UpstreamMalformedEvent
from ..core.sse import (
    DONE_FRAME,
    SSELineBuffer,
    extract_data_payload,
    format_sse_data,
    parse_data_event,
)
from ..types import ChatChunk, ChunkDelta

logger = logging.getLogger("proxy-transfer")

STREAM_CHUNK_ID = "chatcmpl-stream"

# Errors that mean the backend leg broke mid-stream.
STREAM_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.StreamError, ProxyError, OSError)


class MessagesToChatStreamAdapter:
    """Converts an Anthropic Messages SSE byte stream to OpenAI chat chunk frames.

    The only state carried between input chunks is the pending partial line
    held by the line buffer. Each translated frame is yielded as soon as the
    line that produced it is complete.

    Once ``message_stop`` has been translated the adapter is closed: it has
    written the terminal chunk and ``[DONE]`` and produces nothing further.
    """

    def __init__(self, model: Any, chunk_id: str = STREAM_CHUNK_ID):
        """Initialize the stream adapter.

        Args:
            model: Model name from the client's request, echoed in every chunk
            chunk_id: Identifier placed in every chunk
        """
        self.model = model
        self.chunk_id = chunk_id
        self._lines = SSELineBuffer()

        self.closed = False
        self.saw_message_stop = False
        self.delta_count = 0
        self.dropped_lines = 0

    async def adapt_stream(
        self,
        message_stream: AsyncIterator[bytes],
    ) -> AsyncIterator[bytes]:
        """Transform a Messages SSE stream into Chat Completions SSE frames.

        If the input ends or fails before ``message_stop``, a terminal chunk
        and ``[DONE]`` are still emitted so the client is never left hanging.

        Args:
            message_stream: Raw bytes from the backend, split anywhere

        Yields:
            SSE framed chat completion chunks as bytes
        """
        try:
            async for chunk in message_stream:
                for frame in self.feed(chunk):
                    yield frame
                if self.closed:
                    return
        except STREAM_TRANSPORT_ERRORS as exc:
            logger.warning(
                f"Backend stream failed after {self.delta_count} deltas: "
                f"{exc.__class__.__name__}: {exc}"
            )

        for frame in self.finish():
            yield frame

    def feed(self, chunk: bytes) -> list[bytes]:
        """Translate every complete line in ``chunk``.

        Returns:
            Frames to send, in input order
        """
        if self.closed:
            return []
        frames: list[bytes] = []
        for line in self._lines.feed(chunk):
            frames.extend(self._process_line(line))
            if self.closed:
                break
        return frames

    def finish(self) -> list[bytes]:
        """Process any trailing partial line and close the stream.

        Returns:
            Remaining frames, ending with the terminal chunk and ``[DONE]``
            unless the stream was already closed
        """
        if self.closed:
            return []
        frames: list[bytes] = []
        for line in self._lines.flush():
            frames.extend(self._process_line(line))
            if self.closed:
                return frames

        logger.warning(
            f"Backend stream ended without message_stop after {self.delta_count} deltas; "
            f"closing client stream"
        )
        frames.extend(self._close())
        return frames

    def _process_line(self, line: str) -> list[bytes]:
        payload = extract_data_payload(line)
        if not payload:
            return []

        try:
            event = parse_data_event(payload)
        except UpstreamMalformedEvent as exc:
            self.dropped_lines += 1
            logger.debug(f"MessagesStreamAdapter: dropping line: {exc.message} ({payload[:100]})")
            return []

        event_type = event.get("type")

        if event_type == "content_block_delta":
            text = self._delta_text(event)
            if not text:
                return []
            self.delta_count += 1
            return [self._emit_chunk({"content": text}, None)]

        if event_type == "message_stop":
            self.saw_message_stop = True
            return self._close()

        if event_type == "error":
            logger.warning(f"Backend reported stream error: {event.get('error')}")

        return []

    @staticmethod
    def _delta_text(event: dict[str, Any]) -> Optional[str]:
        delta = event.get("delta")
        if not isinstance(delta, dict):
            return None
        text = delta.get("text")
        return text if isinstance(text, str) else None

    def _close(self) -> list[bytes]:
        self.closed = True
        return [self._emit_chunk({}, "stop"), DONE_FRAME]

    def _emit_chunk(self, delta: ChunkDelta, finish_reason: Optional[str]) -> bytes:
        chunk: ChatChunk = {
            "id": self.chunk_id,
            "object": "chat.completion.chunk",
            "created": int(time.time()),
            "model": self.model,
            "choices": [
                {"index": 0, "delta": delta, "finish_reason": finish_reason}
            ],
        }
        return format_sse_data(chunk)


async def adapt_messages_stream_to_chat(
    model: Any,
    message_stream: AsyncIterator[bytes],
) -> AsyncIterator[bytes]:
    """Convenience function to adapt an Anthropic Messages stream to OpenAI chunks.

    Args:
        model: Model name from the client's request
        message_stream: Input Anthropic Messages SSE stream

    Yields:
        OpenAI Chat Completions SSE frames
    """
    adapter = MessagesToChatStreamAdapter(model)
    async for frame in adapter.adapt_stream(message_stream):
        yield frame
