"""OpenAI-compatible chat completions endpoint backed by an Anthropic Messages server."""

import json
import logging
import time
import uuid
from typing import AsyncIterator, Mapping

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.requests import ClientDisconnect

from ...core import Backend, GatewaySettings
from ...messages import (
    MessagesToChatStreamAdapter,
    chat_completions_to_messages,
    message_to_chat_completion,
)

logger = logging.getLogger("proxy-transfer")

MESSAGES_PATH = "/v1/messages"

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def _error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def chat_completions(request: Request) -> Response:
    """POST /v1/chat/completions - translated to POST /v1/messages on the backend.

    Streams when the request's ``stream`` is exactly ``true``; otherwise
    answers with one complete chat completion.
    """
    req_id = uuid.uuid4().hex[:8]
    start_time = time.perf_counter()
    settings: GatewaySettings = request.app.state.gateway_settings
    backend: Backend = request.app.state.backend

    try:
        body = await request.body()
    except ClientDisconnect:
        logger.warning(f"[{req_id}] Client disconnected while sending the request body")
        return Response(status_code=499)  # Client Closed Request

    try:
        payload = json.loads(body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error(f"[{req_id}] Invalid JSON payload: {exc}")
        return _error_response("Invalid JSON payload", status_code=400)

    if not isinstance(payload, Mapping):
        logger.error(f"[{req_id}] Payload must be a JSON object")
        return _error_response("Request body must be a JSON object", status_code=400)

    message_request = chat_completions_to_messages(
        payload, default_max_tokens=settings.default_max_tokens
    )
    is_stream = message_request["stream"]
    target_url = backend.build_url(MESSAGES_PATH)

    logger.info(
        f"[{req_id}] Forwarding {'STREAMING' if is_stream else 'BLOCK'} request to {target_url} "
        f"(model={message_request['model']}, messages={len(message_request['messages'])})"
    )

    if is_stream:
        return await _stream_completion(req_id, backend, message_request, start_time)

    try:
        reply = await backend.post_json(MESSAGES_PATH, message_request)
    except Exception as exc:
        elapsed = time.perf_counter() - start_time
        message = getattr(exc, "message", None) or str(exc)
        logger.error(f"[{req_id}] Proxy Error after {elapsed:.3f}s: {message}")
        return _error_response(message)

    if not isinstance(reply, Mapping):
        logger.warning(f"[{req_id}] Backend reply is not a JSON object; returning empty content")
        reply = {}

    elapsed = time.perf_counter() - start_time
    logger.info(f"[{req_id}] Completed non-streaming response, took {elapsed:.3f}s")
    return JSONResponse(message_to_chat_completion(reply))


async def _stream_completion(
    req_id: str,
    backend: Backend,
    message_request: Mapping,
    start_time: float,
) -> Response:
    try:
        upstream = await backend.open_stream(MESSAGES_PATH, message_request)
    except Exception as exc:
        elapsed = time.perf_counter() - start_time
        message = getattr(exc, "message", None) or str(exc)
        logger.error(f"[{req_id}] Proxy Error opening stream after {elapsed:.3f}s: {message}")
        return _error_response(message)

    adapter = MessagesToChatStreamAdapter(message_request["model"])
    elapsed = time.perf_counter() - start_time
    logger.info(f"[{req_id}] Starting streaming response, setup took {elapsed:.3f}s")

    async def translated_stream() -> AsyncIterator[bytes]:
        try:
            async for frame in adapter.adapt_stream(upstream.aiter_bytes()):
                yield frame
        finally:
            await upstream.aclose()
            total = time.perf_counter() - start_time
            logger.info(
                f"[{req_id}] Stream closed after {total:.3f}s: deltas={adapter.delta_count}, "
                f"dropped_lines={adapter.dropped_lines}, "
                f"message_stop={adapter.saw_message_stop}"
            )

    return StreamingResponse(
        translated_stream(),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
