"""Types for the two chat dialects the gateway translates between.

- Front dialect (OpenAI-style): what clients send to and receive from the
  gateway on ``/v1/chat/completions`` and ``/v1/models``.
- Back dialect (Anthropic-style): what the gateway sends to and receives
  from the backend's ``/v1/messages``.

All values are plain JSON dicts; these types only describe their shape.
"""

from typing import Any, Literal, Optional
from typing_extensions import TypedDict


# =============================================================================
# Front dialect
# =============================================================================


class ChatMessage(TypedDict):
    """A role-tagged message. ``role`` is system, user or assistant."""
    role: str
    content: str


class ChatRequest(TypedDict, total=False):
    model: str
    messages: list[ChatMessage]
    max_tokens: Optional[int]
    temperature: Optional[float]
    stream: bool


class AssistantMessage(TypedDict):
    role: Literal["assistant"]
    content: str


class ChatChoice(TypedDict):
    index: int
    message: AssistantMessage
    finish_reason: str


class ChatResponse(TypedDict):
    id: Any
    object: Literal["chat.completion"]
    created: int
    model: Any
    choices: list[ChatChoice]


class ChunkDelta(TypedDict, total=False):
    content: str


class ChunkChoice(TypedDict):
    index: int
    delta: ChunkDelta
    finish_reason: Optional[str]


class ChatChunk(TypedDict):
    """One streamed chunk: a text delta, or the terminal ``stop`` chunk."""
    id: str
    object: Literal["chat.completion.chunk"]
    created: int
    model: Any
    choices: list[ChunkChoice]


class ModelEntry(TypedDict):
    id: str
    object: Literal["model"]
    created: int
    owned_by: str


class ModelListing(TypedDict):
    object: Literal["list"]
    data: list[Any]


# =============================================================================
# Back dialect
# =============================================================================


class MessageRequest(TypedDict, total=False):
    """``temperature`` is only present when the client sent one."""
    model: Any
    system: str
    messages: list[ChatMessage]
    max_tokens: int
    temperature: Optional[float]
    stream: bool


class TextBlock(TypedDict, total=False):
    type: str
    text: str


class MessageResponse(TypedDict, total=False):
    id: str
    type: str
    role: str
    model: str
    content: list[TextBlock]
    stop_reason: Optional[str]


class MessageEvent(TypedDict, total=False):
    """A streamed backend event.

    Only ``content_block_delta`` (``delta.text``) and ``message_stop`` are
    acted on; message_start, content_block_start, content_block_stop,
    message_delta and ping are recognized and ignored.
    """
    type: str
    index: int
    delta: dict[str, Any]
    message: dict[str, Any]
