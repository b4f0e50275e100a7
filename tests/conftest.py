"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from proxy_transfer.core.settings import GatewaySettings
from proxy_transfer.core.upstream_transport import (
    clear_backend_transports,
    register_backend_transport,
)
from proxy_transfer.main import create_app
from proxy_transfer.testing import FakeBackend

BACKEND_BASE = "http://backend.test:8080"


@pytest.fixture
def fake_backend() -> Generator[FakeBackend, None, None]:
    """A fake backend reachable at BACKEND_BASE for the duration of the test."""
    backend = FakeBackend()
    register_backend_transport(BACKEND_BASE, backend.transport)
    yield backend
    clear_backend_transports()


@pytest.fixture
def gateway_settings() -> GatewaySettings:
    return GatewaySettings(
        backend_base=BACKEND_BASE,
        timeout_seconds=5.0,
        fallback_model_ids=("Manual-Model-Entry", "claude-3-opus", "claude-3-sonnet"),
    )


@pytest.fixture
def client(fake_backend: FakeBackend, gateway_settings: GatewaySettings) -> Generator[TestClient, None, None]:
    app = create_app(gateway_settings)
    with TestClient(app) as test_client:
        yield test_client
