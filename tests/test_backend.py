"""Tests for the core backend module."""

import httpx
import pytest

from proxy_transfer.core import backend as backend_module
from proxy_transfer.core.backend import Backend, format_httpx_error
from proxy_transfer.core.exceptions import (
    BackendStatusError,
    BackendUnreachableError,
    InvalidBackendResponseError,
)
from proxy_transfer.testing import FakeBackend, FakeReply

from conftest import BACKEND_BASE


class TestBackendUrls:
    def test_build_url(self):
        backend = Backend("http://example.com:8080")
        assert backend.build_url("/v1/messages") == "http://example.com:8080/v1/messages"

    def test_build_url_strips_trailing_slash_and_adds_leading(self):
        backend = Backend("http://example.com/")
        assert backend.build_url("models") == "http://example.com/models"


class TestFormatHttpxError:
    def test_includes_request(self):
        request = httpx.Request("GET", "http://example.com/v1/models")
        exc = httpx.ConnectError("refused", request=request)
        message = format_httpx_error(exc)
        assert message.startswith("ConnectError; refused")
        assert "request=GET http://example.com/v1/models" in message

    def test_falls_back_to_url(self):
        exc = httpx.ConnectError("refused")
        assert "url=http://x/y" in format_httpx_error(exc, url="http://x/y")

    def test_timeout_is_reported(self):
        exc = httpx.ReadTimeout("slow")
        assert "timeout=5.0s" in format_httpx_error(exc, timeout=5.0)


class TestBackendRequests:
    """Backend calls against the fake backend transport."""

    @pytest.mark.asyncio
    async def test_get_json(self, fake_backend: FakeBackend):
        fake_backend.enqueue_listing("/v1/models", ["a"])
        assert await Backend(BACKEND_BASE).get_json("/v1/models") == ["a"]

    @pytest.mark.asyncio
    async def test_get_json_status_error(self, fake_backend: FakeBackend):
        fake_backend.enqueue("/v1/models", FakeReply(status_code=503, body=b"busy"))
        with pytest.raises(BackendStatusError) as excinfo:
            await Backend(BACKEND_BASE).get_json("/v1/models")
        assert excinfo.value.status_code == 503
        assert "busy" in excinfo.value.message

    @pytest.mark.asyncio
    async def test_get_json_connection_error(self, fake_backend: FakeBackend):
        fake_backend.enqueue("/v1/models", FakeReply(error=httpx.ConnectError("refused")))
        with pytest.raises(BackendUnreachableError, match="ConnectError"):
            await Backend(BACKEND_BASE).get_json("/v1/models")

    @pytest.mark.asyncio
    async def test_get_json_invalid_body(self, fake_backend: FakeBackend):
        fake_backend.enqueue("/v1/models", FakeReply(body=b"{oops"))
        with pytest.raises(InvalidBackendResponseError):
            await Backend(BACKEND_BASE).get_json("/v1/models")

    @pytest.mark.asyncio
    async def test_post_json_sends_body(self, fake_backend: FakeBackend):
        fake_backend.enqueue_message("hello")

        reply = await Backend(BACKEND_BASE).post_json("/v1/messages", {"model": "m", "stream": False})

        assert reply["content"][0]["text"] == "hello"
        method, path, body = fake_backend.received[0]
        assert (method, path) == ("POST", "/v1/messages")
        assert body == {"model": "m", "stream": False}

    @pytest.mark.asyncio
    async def test_open_stream_yields_bytes_and_closes(self, fake_backend: FakeBackend):
        fake_backend.enqueue_message_stream([b"data: 1\n", b"data: 2\n"])

        stream = await Backend(BACKEND_BASE).open_stream("/v1/messages", {"stream": True})
        received = b"".join([chunk async for chunk in stream.aiter_bytes()])
        await stream.aclose()
        await stream.aclose()

        assert received == b"data: 1\ndata: 2\n"
        assert stream.closed is True
        assert stream.status_code == 200

    @pytest.mark.asyncio
    async def test_open_stream_status_error(self, fake_backend: FakeBackend):
        fake_backend.enqueue("/v1/messages", FakeReply(status_code=400, json_body={"error": "bad"}))
        with pytest.raises(BackendStatusError) as excinfo:
            await Backend(BACKEND_BASE).open_stream("/v1/messages", {"stream": True})
        assert excinfo.value.status_code == 400

    @pytest.mark.asyncio
    async def test_open_stream_connection_error(self, fake_backend: FakeBackend):
        fake_backend.enqueue("/v1/messages", FakeReply(error=httpx.ConnectError("refused")))
        with pytest.raises(BackendUnreachableError):
            await Backend(BACKEND_BASE).open_stream("/v1/messages", {"stream": True})


class _SendErrorClient:
    last_instance = None

    def __init__(self, *args, **kwargs):
        self.closed = False
        type(self).last_instance = self

    def build_request(self, method, url, headers=None, content=None):
        return httpx.Request(method, url, headers=headers, content=content)

    async def send(self, request, stream=False):
        raise RuntimeError("send failed")

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
async def test_open_stream_closes_client_when_send_fails(monkeypatch):
    monkeypatch.setattr(backend_module.httpx, "AsyncClient", _SendErrorClient)

    with pytest.raises(RuntimeError, match="send failed"):
        await Backend("http://example.com").open_stream("/v1/messages", {})

    assert _SendErrorClient.last_instance.closed is True
