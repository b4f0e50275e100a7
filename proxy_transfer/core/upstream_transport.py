"""In-process HTTPX transports for backend hosts.

Lets tests (and embedded deployments) point the gateway at an ASGI app or a
``httpx.MockTransport`` instead of a real socket.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger("proxy-transfer")

_TRANSPORTS: dict[str, httpx.AsyncBaseTransport] = {}


def _netloc(url: str) -> str:
    return urlparse(url).netloc.strip().lower()


def register_backend_transport(base_url: str, transport: httpx.AsyncBaseTransport) -> None:
    """Route every request for ``base_url``'s host through ``transport``."""
    host = _netloc(base_url)
    if not host:
        raise ValueError(f"cannot register transport for URL without host: {base_url!r}")
    _TRANSPORTS[host] = transport
    logger.debug("Registered backend transport for host '%s'", host)


def unregister_backend_transport(base_url: str) -> None:
    _TRANSPORTS.pop(_netloc(base_url), None)


def clear_backend_transports() -> None:
    _TRANSPORTS.clear()


def get_backend_transport(url: str) -> Optional[httpx.AsyncBaseTransport]:
    if not url:
        return None
    host = _netloc(url)
    if not host:
        return None
    return _TRANSPORTS.get(host)
