"""Models listing endpoint - OpenAI compatible."""

import logging

from fastapi import Request

from ...models import ModelRegistry

logger = logging.getLogger("proxy-transfer")


async def list_models(request: Request) -> dict:
    """List the backend's models in OpenAI API format.

    GET /v1/models

    Always answers 200; backend failures yield the fallback listing. A
    canonical backend listing is sent back exactly as received.
    """
    logger.info("Received models list request")
    registry: ModelRegistry = request.app.state.model_registry
    return await registry.list_models()
