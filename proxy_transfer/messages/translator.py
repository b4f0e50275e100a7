"""OpenAI Chat Completions <-> Anthropic Messages translation.

Requests flow front to back (chat completions -> messages); blocking replies
flow back to front (message -> chat completion). Only plain text content is
carried across.

Key mappings:
- OpenAI system messages (anywhere in the list) -> Anthropic top-level system
- OpenAI user/assistant messages -> Anthropic messages, order preserved
- Anthropic first text block -> OpenAI choices[0].message.content

Reference:
- Anthropic Messages API: https://docs.anthropic.com/en/api/messages
- OpenAI Chat Completions: https://platform.openai.com/docs/api-reference/chat
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

from ..core.settings import DEFAULT_MAX_TOKENS
from ..types import ChatMessage, ChatResponse, MessageRequest

logger = logging.getLogger("proxy-transfer")


def is_stream_request(payload: Mapping[str, Any]) -> bool:
    """Only a literal JSON ``true`` turns streaming on."""
    return payload.get("stream") is True


def _content_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return str(content)


def chat_completions_to_messages(
    payload: Mapping[str, Any],
    default_max_tokens: int = DEFAULT_MAX_TOKENS,
) -> MessageRequest:
    """Translate an OpenAI Chat Completions request to an Anthropic Messages request.

    System messages are pulled out of the list and joined with newlines into
    the top-level ``system`` field. Everything else keeps its relative order.
    Absent fields are defaulted rather than rejected.

    Args:
        payload: OpenAI Chat Completions request body
        default_max_tokens: Used when ``max_tokens`` is absent or falsy

    Returns:
        Anthropic Messages request body
    """
    system_parts: list[str] = []
    anthropic_messages: list[ChatMessage] = []

    messages = payload.get("messages")
    if not isinstance(messages, list):
        messages = []

    for msg in messages:
        if not isinstance(msg, Mapping):
            logger.debug(f"Skipping non-object message entry: {msg!r}")
            continue
        role = msg.get("role")
        if role == "system":
            system_parts.append(_content_text(msg.get("content")))
            continue
        anthropic_messages.append({"role": role, "content": msg.get("content")})

    result: MessageRequest = {
        "model": payload.get("model"),
        "messages": anthropic_messages,
        "system": "\n".join(system_parts).strip(),
        "max_tokens": payload.get("max_tokens") or default_max_tokens,
        "stream": is_stream_request(payload),
    }

    if "temperature" in payload:
        result["temperature"] = payload["temperature"]

    return result


def _first_text(content: Any) -> str:
    if not isinstance(content, list) or not content:
        return ""
    block = content[0]
    if not isinstance(block, Mapping):
        return ""
    text = block.get("text")
    return text if isinstance(text, str) else ""


def message_to_chat_completion(payload: Mapping[str, Any]) -> ChatResponse:
    """Translate an Anthropic Messages response to an OpenAI Chat Completions response.

    The backend ``id`` and ``model`` are carried through verbatim. Missing
    content degrades to an empty string. ``finish_reason`` is always
    ``"stop"``; the backend stop reason is not mapped.
    """
    return {
        "id": payload.get("id"),
        "object": "chat.completion",
        "created": int(time.time()),
        "model": payload.get("model"),
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": _first_text(payload.get("content")),
                },
                "finish_reason": "stop",
            }
        ],
    }
