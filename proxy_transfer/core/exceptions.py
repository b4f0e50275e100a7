"""Core exceptions for the gateway."""

from typing import Optional


class ProxyError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BackendUnreachableError(ProxyError):
    """Raised when the backend cannot be reached or answers with an error."""


class BackendStatusError(BackendUnreachableError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: Optional[bytes] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InvalidBackendResponseError(ProxyError):
    """Raised when a backend body cannot be decoded as JSON."""


class ShapeError(ProxyError):
    """Raised when a model listing matches no known shape."""


class UpstreamMalformedEvent(ProxyError):
    """Raised when a single SSE data line from the backend cannot be parsed."""

    def __init__(self, message: str, line: str = "") -> None:
        super().__init__(message)
        self.line = line
