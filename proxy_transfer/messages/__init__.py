"""OpenAI Chat Completions <-> Anthropic Messages translation helpers.

Lets OpenAI-dialect clients talk to a backend that only speaks the
Anthropic Messages API.
"""

from .translator import (
    chat_completions_to_messages,
    is_stream_request,
    message_to_chat_completion,
)
from .stream_adapter import (
    MessagesToChatStreamAdapter,
    adapt_messages_stream_to_chat,
)

__all__ = [
    "chat_completions_to_messages",
    "is_stream_request",
    "message_to_chat_completion",
    "MessagesToChatStreamAdapter",
    "adapt_messages_stream_to_chat",
]
