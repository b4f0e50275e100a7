"""API routes for the gateway."""

from .chat import MESSAGES_PATH, chat_completions
from .models import list_models

__all__ = [
    "MESSAGES_PATH",
    "chat_completions",
    "list_models",
]
