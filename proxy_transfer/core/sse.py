"""SSE (Server-Sent Events) line buffering and framing utilities."""

import codecs
import json
from typing import Any, Optional

from .exceptions import UpstreamMalformedEvent

DATA_PREFIX = "data:"
DONE_FRAME = b"data: [DONE]\n\n"


class SSELineBuffer:
    """Accumulates raw stream bytes and hands back complete lines.

    Bytes may arrive split at any offset, including inside a multibyte UTF-8
    sequence or a ``\\r\\n`` pair. The trailing partial line is kept until the
    next ``feed`` or until ``flush`` at end of stream.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: bytes) -> list[str]:
        if not chunk:
            return []
        self._pending += self._decoder.decode(chunk)
        return self._split()

    def flush(self) -> list[str]:
        """Return whatever is left once the stream has ended and reset."""
        self._pending += self._decoder.decode(b"", final=True)
        lines = self._split()
        rest = self._pending.rstrip("\r")
        if rest:
            lines.append(rest)
        self._pending = ""
        self._decoder.reset()
        return lines

    def _split(self) -> list[str]:
        text = self._pending
        # A lone trailing "\r" may be the first half of "\r\n".
        held_cr = text.endswith("\r")
        if held_cr:
            text = text[:-1]
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        *lines, rest = text.split("\n")
        self._pending = rest + ("\r" if held_cr else "")
        return lines


def extract_data_payload(line: str) -> Optional[str]:
    """Return the payload of a ``data:`` line, or None for any other line."""
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):].strip()


def parse_data_event(payload: str) -> dict[str, Any]:
    """Parse a ``data:`` payload into an event mapping.

    Raises:
        UpstreamMalformedEvent: If the payload is not a JSON object.
    """
    try:
        event = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise UpstreamMalformedEvent(f"invalid JSON in SSE data: {exc}", payload) from exc
    if not isinstance(event, dict):
        raise UpstreamMalformedEvent("SSE data is not a JSON object", payload)
    return event


def format_sse_data(data: dict[str, Any]) -> bytes:
    """Frame one JSON object as a ``data: <json>\\n\\n`` unit."""
    json_str = json.dumps(data, ensure_ascii=False)
    return f"data: {json_str}\n\n".encode("utf-8")
