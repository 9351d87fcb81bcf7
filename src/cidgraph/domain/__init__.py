"""Domain services for materializing and comparing content-addressed graphs."""

from __future__ import annotations

from .errors import (
    FetchFailedError,
    GraphError,
    InsufficientInputsError,
    InvalidReferenceError,
    ManifestError,
    NetworkError,
    RateLimitedError,
    UnsafeFilenameError,
)
from .json_values import JsonObject, JsonValue, link_target
from .ports import ContentFetcher, LabelLookup
from .references import hex_to_reference, is_valid_reference, reference_to_hex

__all__ = [
    "ContentFetcher",
    "FetchFailedError",
    "GraphError",
    "InsufficientInputsError",
    "InvalidReferenceError",
    "JsonObject",
    "JsonValue",
    "LabelLookup",
    "ManifestError",
    "NetworkError",
    "RateLimitedError",
    "UnsafeFilenameError",
    "hex_to_reference",
    "is_valid_reference",
    "link_target",
    "reference_to_hex",
]
