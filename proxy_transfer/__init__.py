"""proxy-transfer - OpenAI chat completions front end for Anthropic Messages backends.

Clients speak ``/v1/chat/completions`` and ``/v1/models``; the gateway
forwards to a backend's ``/v1/messages`` and translates requests, blocking
replies and SSE streams in both directions.

Example:
    >>> from proxy_transfer.main import app
    >>> import uvicorn
    >>> uvicorn.run(app, host="127.0.0.1", port=3001)
"""

from .main import app, create_app, settings
from .core import Backend, GatewaySettings, ProxyError, load_settings
from .config_loader import load_config
from .logging import logger, setup_logging
from .messages import (
    MessagesToChatStreamAdapter,
    chat_completions_to_messages,
    message_to_chat_completion,
)
from .models import ModelRegistry, normalize_model_listing

__all__ = [
    "app",
    "Backend",
    "chat_completions_to_messages",
    "create_app",
    "GatewaySettings",
    "load_config",
    "load_settings",
    "logger",
    "message_to_chat_completion",
    "MessagesToChatStreamAdapter",
    "ModelRegistry",
    "normalize_model_listing",
    "ProxyError",
    "settings",
    "setup_logging",
]
