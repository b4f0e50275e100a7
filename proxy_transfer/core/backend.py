"""Backend connection handling for the messages-dialect server."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, Optional

import httpx

from .exceptions import (
    BackendStatusError,
    BackendUnreachableError,
    InvalidBackendResponseError,
)
from .upstream_transport import get_backend_transport

logger = logging.getLogger("proxy-transfer")

DEFAULT_TIMEOUT = 60.0
JSON_HEADERS = {"Content-Type": "application/json"}


def format_httpx_error(exc: Any, url: Optional[str] = None, timeout: Optional[float] = None) -> str:
    """Produce a detailed, user-facing description of an httpx error."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)

    try:
        request = exc.request
    except (AttributeError, RuntimeError):
        request = None
    if request is not None:
        parts.append(f"request={request.method} {request.url}")
    elif url:
        parts.append(f"url={url}")

    if isinstance(exc, httpx.TimeoutException):
        parts.append(f"timeout={timeout or DEFAULT_TIMEOUT}s")

    return "; ".join(parts)


def _decode_json(content: bytes, url: str) -> Any:
    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidBackendResponseError(f"invalid JSON from {url}: {exc}") from exc


class BackendStream:
    """An open streaming response from the backend.

    Owns both the response and its client; ``aclose`` releases both and is
    safe to call more than once.
    """

    def __init__(self, url: str, client: httpx.AsyncClient, response: httpx.Response) -> None:
        self.url = url
        self.status_code = response.status_code
        self._client = client
        self._response = response
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        async for chunk in self._response.aiter_bytes():
            yield chunk

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Closing backend stream for {self.url}")
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


@dataclass
class Backend:
    """The messages-dialect server the gateway forwards to."""

    base_url: str
    timeout: Optional[float] = DEFAULT_TIMEOUT

    def build_url(self, path: str) -> str:
        base = self.base_url.rstrip("/")
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{base}{path}"

    def _client(self, url: str, timeout: httpx.Timeout) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            transport=get_backend_transport(url),
            follow_redirects=True,
        )

    async def get_json(self, path: str) -> Any:
        """GET ``path`` and decode the JSON body.

        Raises:
            BackendUnreachableError: On network failure or non-2xx status.
            InvalidBackendResponseError: If the body is not JSON.
        """
        url = self.build_url(path)
        logger.debug(f"GET {url}")
        try:
            async with self._client(url, httpx.Timeout(self.timeout)) as client:
                resp = await client.get(url)
        except httpx.HTTPError as exc:
            raise BackendUnreachableError(format_httpx_error(exc, url, self.timeout)) from exc
        self._raise_for_status(url, resp.status_code, resp.content)
        return _decode_json(resp.content, url)

    async def post_json(self, path: str, payload: Mapping[str, Any]) -> Any:
        """POST ``payload`` as JSON and decode the JSON reply."""
        url = self.build_url(path)
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        logger.debug(f"POST {url} ({len(body)} bytes)")
        try:
            async with self._client(url, httpx.Timeout(self.timeout)) as client:
                resp = await client.post(url, headers=JSON_HEADERS, content=body)
        except httpx.HTTPError as exc:
            raise BackendUnreachableError(format_httpx_error(exc, url, self.timeout)) from exc
        self._raise_for_status(url, resp.status_code, resp.content)
        return _decode_json(resp.content, url)

    async def open_stream(self, path: str, payload: Mapping[str, Any]) -> BackendStream:
        """POST ``payload`` and return the response body as an open byte stream.

        The read timeout is disabled since generation may pause between
        events. The caller must ``aclose`` the returned stream.
        """
        url = self.build_url(path)
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        stream_timeout = httpx.Timeout(
            connect=self.timeout, read=None, write=self.timeout, pool=self.timeout
        )
        client = self._client(url, stream_timeout)
        try:
            request = client.build_request("POST", url, headers=JSON_HEADERS, content=body)
            logger.debug(f"Sending streaming request to {url}")
            resp = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            raise BackendUnreachableError(format_httpx_error(exc, url, self.timeout)) from exc
        except BaseException:
            await client.aclose()
            raise

        if resp.status_code >= 400:
            try:
                data = await resp.aread()
            except httpx.HTTPError:
                data = b""
            finally:
                await resp.aclose()
                await client.aclose()
            self._raise_for_status(url, resp.status_code, data)

        return BackendStream(url, client, resp)

    @staticmethod
    def _raise_for_status(url: str, status_code: int, content: bytes) -> None:
        if 200 <= status_code < 300:
            return
        snippet = content[:200].decode("utf-8", errors="replace") if content else ""
        message = f"{url} returned status {status_code}"
        if snippet:
            message = f"{message}: {snippet}"
        raise BackendStatusError(message, status_code, content)
