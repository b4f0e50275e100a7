"""Normalization of backend model listings into the OpenAI list shape.

Backends answer ``/v1/models`` in different shapes. Each supported shape is
one ``ListingShape`` member with one detector; detectors are tried in the
order of ``SHAPE_DETECTORS`` and the first match wins.

    CANONICAL    {"object": "list", "data": [...]}           returned as is
    ID_LIST      ["model-a", "model-b"]                      ids wrapped
    NESTED_LIST  {"models": [{"id": ...}, ...], ...}         first list wrapped

Only the first list-valued field of a NESTED_LIST payload is used, even when
the mapping holds several lists.
"""

from __future__ import annotations

import enum
import time
from typing import Any, Callable, Iterable, Mapping, Optional

from ..core.exceptions import ShapeError
from ..core.settings import DEFAULT_OWNED_BY
from ..types import ModelEntry, ModelListing

UNKNOWN_MODEL_ID = "unknown-model"
MODEL_ID_FIELDS = ("id", "model", "name")


class ListingShape(enum.Enum):
    CANONICAL = "canonical"
    ID_LIST = "id_list"
    NESTED_LIST = "nested_list"


def _is_canonical(payload: Any) -> bool:
    return isinstance(payload, Mapping) and isinstance(payload.get("data"), list)


def _is_id_list(payload: Any) -> bool:
    return isinstance(payload, list) and all(isinstance(item, str) for item in payload)


def _first_list_field(payload: Any) -> Optional[list[Any]]:
    if not isinstance(payload, Mapping):
        return None
    for value in payload.values():
        if isinstance(value, list):
            return value
    return None


def _has_list_field(payload: Any) -> bool:
    return _first_list_field(payload) is not None


SHAPE_DETECTORS: tuple[tuple[ListingShape, Callable[[Any], bool]], ...] = (
    (ListingShape.CANONICAL, _is_canonical),
    (ListingShape.ID_LIST, _is_id_list),
    (ListingShape.NESTED_LIST, _has_list_field),
)


def detect_listing_shape(payload: Any) -> ListingShape:
    """Return the first shape whose detector accepts ``payload``.

    Raises:
        ShapeError: If no detector matches.
    """
    for shape, detector in SHAPE_DETECTORS:
        if detector(payload):
            return shape
    raise ShapeError(f"Unknown model list format: {type(payload).__name__}")


def extract_model_id(entry: Any) -> str:
    """Probe ``id``, ``model`` and ``name`` in that order."""
    if isinstance(entry, Mapping):
        for field_name in MODEL_ID_FIELDS:
            value = entry.get(field_name)
            if value:
                return str(value)
    return UNKNOWN_MODEL_ID


def make_model_entry(model_id: str, owned_by: str, created: int) -> ModelEntry:
    return {
        "id": model_id,
        "object": "model",
        "created": created,
        "owned_by": owned_by,
    }


def build_listing(
    model_ids: Iterable[str],
    owned_by: str = DEFAULT_OWNED_BY,
    created: Optional[int] = None,
) -> ModelListing:
    if created is None:
        created = int(time.time())
    return {
        "object": "list",
        "data": [make_model_entry(model_id, owned_by, created) for model_id in model_ids],
    }


def normalize_model_listing(
    payload: Any,
    owned_by: str = DEFAULT_OWNED_BY,
    created: Optional[int] = None,
) -> ModelListing:
    """Reshape a backend listing payload into the canonical list shape.

    Args:
        payload: Decoded JSON body from the backend
        owned_by: ``owned_by`` for entries this function creates
        created: Timestamp for created entries; defaults to now

    Raises:
        ShapeError: If the payload matches no known shape.
    """
    shape = detect_listing_shape(payload)

    if shape is ListingShape.CANONICAL:
        return payload

    if shape is ListingShape.ID_LIST:
        return build_listing(payload, owned_by, created)

    entries = _first_list_field(payload) or []
    return build_listing((extract_model_id(entry) for entry in entries), owned_by, created)
