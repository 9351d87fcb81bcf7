"""Public interface for the schema manifest adapter."""

from __future__ import annotations

from .client import SchemaManifestClient
from .schema import DATA_GROUP, ManifestEntry, SchemaManifest

__all__ = ["DATA_GROUP", "ManifestEntry", "SchemaManifest", "SchemaManifestClient"]
