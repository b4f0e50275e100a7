"""Type definitions for the gateway."""

from .chat import (
    AssistantMessage,
    ChatChoice,
    ChatChunk,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ChunkChoice,
    ChunkDelta,
    MessageEvent,
    MessageRequest,
    MessageResponse,
    ModelEntry,
    ModelListing,
    TextBlock,
)

__all__ = [
    "AssistantMessage",
    "ChatChoice",
    "ChatChunk",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ChunkChoice",
    "ChunkDelta",
    "MessageEvent",
    "MessageRequest",
    "MessageResponse",
    "ModelEntry",
    "ModelListing",
    "TextBlock",
]
