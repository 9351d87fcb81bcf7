"""HTTP client for the schema manifest."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from cidgraph.adapters.http_resilience import ResilientClient
from cidgraph.config.http_resilience import ResilienceConfig
from cidgraph.domain.errors import ManifestError

from .schema import SchemaManifest

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)


class SchemaManifestClient:
    """Loads the schema manifest once and keeps it for later lookups."""

    def __init__(
        self,
        *,
        manifest_url: str,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._manifest_url = manifest_url
        self._resilience = ResilienceConfig(name="schema-manifest")
        self._client_factory = client_factory or ResilientClient
        self._manifest: SchemaManifest | None = None

    async def load(self) -> SchemaManifest:
        if self._manifest is not None:
            return self._manifest

        log.info("Fetching schema manifest from %s", self._manifest_url)
        try:
            async with self._client_factory(self._resilience) as client:
                response = await client.get(self._manifest_url)
                response.raise_for_status()
                manifest = SchemaManifest.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            log.error("Failed to load schema manifest: %s", exc)
            raise ManifestError("Failed to load schema manifest") from exc

        log.info(
            "Loaded schema manifest with %s entries (%s dataGroups)",
            len(manifest.root),
            manifest.data_group_count,
        )
        self._manifest = manifest
        return manifest
