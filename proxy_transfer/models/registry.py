"""Model listing lookup against the backend with sequential path fallback."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from ..core.backend import Backend
from ..core.exceptions import BackendUnreachableError, ProxyError
from ..core.settings import DEFAULT_FALLBACK_MODEL_IDS, DEFAULT_OWNED_BY
from ..types import ModelListing
from .normalizer import build_listing, normalize_model_listing

logger = logging.getLogger("proxy-transfer")

# Tried in order; the second only when the first fails.
MODEL_LIST_PATHS = ("/v1/models", "/models")


class ModelRegistry:
    """Serves the backend's models in the canonical listing shape.

    ``list_models`` never raises for backend or shape failures: it answers
    with the fixed fallback listing instead.
    """

    def __init__(
        self,
        backend: Backend,
        fallback_model_ids: Iterable[str] = DEFAULT_FALLBACK_MODEL_IDS,
        owned_by: str = DEFAULT_OWNED_BY,
        listing_paths: Sequence[str] = MODEL_LIST_PATHS,
    ) -> None:
        self.backend = backend
        self.fallback_model_ids = tuple(fallback_model_ids)
        self.owned_by = owned_by
        self.listing_paths = tuple(listing_paths)

    def fallback_listing(self) -> ModelListing:
        return build_listing(self.fallback_model_ids, self.owned_by)

    async def fetch_payload(self) -> Any:
        """Return the first listing body any path yields.

        Raises:
            BackendUnreachableError: If every path failed.
        """
        failures: list[str] = []
        for path in self.listing_paths:
            url = self.backend.build_url(path)
            logger.info(f"Fetching models from {url}...")
            try:
                return await self.backend.get_json(path)
            except ProxyError as exc:
                logger.info(f"{path} failed: {exc.message}")
                failures.append(f"{path}: {exc.message}")
        raise BackendUnreachableError(
            "Could not fetch models from backend. " + " | ".join(failures)
        )

    async def list_models(self) -> ModelListing:
        try:
            payload = await self.fetch_payload()
            listing = normalize_model_listing(payload, owned_by=self.owned_by)
        except ProxyError as exc:
            logger.error(f"Model Fetch Error: {exc.message}; serving fallback listing")
            return self.fallback_listing()
        logger.info(f"Serving {len(listing['data'])} models")
        return listing
