"""Backend model listing lookup and normalization."""

from .normalizer import (
    ListingShape,
    build_listing,
    detect_listing_shape,
    extract_model_id,
    normalize_model_listing,
)
from .registry import MODEL_LIST_PATHS, ModelRegistry

__all__ = [
    "ListingShape",
    "MODEL_LIST_PATHS",
    "ModelRegistry",
    "build_listing",
    "detect_listing_shape",
    "extract_model_id",
    "normalize_model_listing",
]
