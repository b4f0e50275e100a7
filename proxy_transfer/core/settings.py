"""Gateway settings resolved from config file values and environment overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger("proxy-transfer")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001
DEFAULT_BACKEND_BASE = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_TOKENS = 4096
DEFAULT_OWNED_BY = "proxy"
DEFAULT_LOG_LEVEL = "INFO"
# Names understood by both the logging module and uvicorn.
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
DEFAULT_FALLBACK_MODEL_IDS = (
    "Manual-Model-Entry",
    "claude-3-opus",
    "claude-3-sonnet",
)


@dataclass(frozen=True)
class GatewaySettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    backend_base: str = DEFAULT_BACKEND_BASE
    timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS
    fallback_model_ids: tuple[str, ...] = field(default=DEFAULT_FALLBACK_MODEL_IDS)
    owned_by: str = DEFAULT_OWNED_BY
    default_max_tokens: int = DEFAULT_MAX_TOKENS
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def listen_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def _get(cfg: dict, *keys: str):
    cur = cfg
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid integer setting %r", value)
        return None


def _to_str(value) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid number setting %r", value)
        return None


def _to_str_tuple(value) -> Optional[tuple[str, ...]]:
    if not isinstance(value, list):
        return None
    items = tuple(str(item) for item in value if item is not None and str(item).strip())
    return items or None


def _to_log_level(value) -> Optional[str]:
    level = _to_str(value)
    if level is None:
        return None
    level = level.upper()
    if level not in LOG_LEVELS:
        logger.warning("Ignoring unknown log level %r", value)
        return None
    return level


def load_settings(config: Optional[dict[str, Any]] = None) -> GatewaySettings:
    """Build settings from a loaded config dict, then apply env overrides."""
    cfg = config or {}

    host = _to_str(_get(cfg, "server", "host")) or DEFAULT_HOST
    port = _to_int(_get(cfg, "server", "port")) or DEFAULT_PORT
    backend_base = _to_str(_get(cfg, "backend", "base_url")) or DEFAULT_BACKEND_BASE
    timeout_seconds = _to_float(_get(cfg, "backend", "timeout_seconds"))
    if timeout_seconds is None:
        timeout_seconds = DEFAULT_TIMEOUT_SECONDS
    fallback_ids = _to_str_tuple(_get(cfg, "models", "fallback_ids")) or DEFAULT_FALLBACK_MODEL_IDS
    owned_by = _to_str(_get(cfg, "models", "owned_by")) or DEFAULT_OWNED_BY
    default_max_tokens = (
        _to_int(_get(cfg, "messages", "default_max_tokens")) or DEFAULT_MAX_TOKENS
    )
    log_level = _to_log_level(_get(cfg, "logging", "level")) or DEFAULT_LOG_LEVEL

    # Env overrides
    host = os.getenv("PROXY_TRANSFER_HOST", host)
    port = _to_int(os.getenv("PROXY_TRANSFER_PORT")) or port
    backend_base = os.getenv("PROXY_TRANSFER_BACKEND", backend_base)
    timeout_env = os.getenv("PROXY_TRANSFER_TIMEOUT")
    if timeout_env is not None:
        parsed_timeout = _to_float(timeout_env)
        if parsed_timeout is not None:
            timeout_seconds = parsed_timeout
    log_level = _to_log_level(os.getenv("PROXY_TRANSFER_LOG_LEVEL")) or log_level

    return GatewaySettings(
        host=host,
        port=port,
        backend_base=backend_base.rstrip("/"),
        timeout_seconds=timeout_seconds if timeout_seconds and timeout_seconds > 0 else None,
        fallback_model_ids=fallback_ids,
        owned_by=owned_by,
        default_max_tokens=default_max_tokens,
        log_level=log_level,
    )
