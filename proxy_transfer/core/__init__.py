"""Core module initialization."""

from .backend import Backend, BackendStream, format_httpx_error
from .exceptions import (
    BackendStatusError,
    BackendUnreachableError,
    InvalidBackendResponseError,
    ProxyError,
    ShapeError,
    UpstreamMalformedEvent,
)
from .settings import GatewaySettings, load_settings
from .sse import DONE_FRAME, SSELineBuffer, format_sse_data

__all__ = [
    "Backend",
    "BackendStatusError",
    "BackendStream",
    "BackendUnreachableError",
    "DONE_FRAME",
    "GatewaySettings",
    "InvalidBackendResponseError",
    "ProxyError",
    "SSELineBuffer",
    "ShapeError",
    "UpstreamMalformedEvent",
    "format_httpx_error",
    "format_sse_data",
    "load_settings",
]
