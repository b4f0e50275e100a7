"""Main FastAPI application for the proxy-transfer gateway."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.routes import chat_completions, list_models
from .config_loader import load_config
from .core import Backend, GatewaySettings, load_settings
from .logging import setup_logging
from .models import ModelRegistry

logger = logging.getLogger("proxy-transfer")


def create_app(settings: Optional[GatewaySettings] = None) -> FastAPI:
    """Build the gateway application.

    Args:
        settings: Gateway settings. Defaults to the config file plus
            environment overrides.

    Returns:
        The configured FastAPI application instance.
    """
    if settings is None:
        settings = load_settings(load_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Proxy running on %s", settings.listen_url)
        logger.info("Forwarding to backend %s", settings.backend_base)
        yield
        logger.info("Proxy shutting down")

    app = FastAPI(title="proxy-transfer", lifespan=lifespan)

    backend = Backend(base_url=settings.backend_base, timeout=settings.timeout_seconds)
    app.state.gateway_settings = settings
    app.state.backend = backend
    app.state.model_registry = ModelRegistry(
        backend,
        fallback_model_ids=settings.fallback_model_ids,
        owned_by=settings.owned_by,
    )

    app.get("/v1/models")(list_models)
    app.post("/v1/chat/completions")(chat_completions)

    return app


settings = load_settings(load_config())
setup_logging(settings.log_level)
app = create_app(settings)

__all__ = ["app", "create_app", "settings"]
