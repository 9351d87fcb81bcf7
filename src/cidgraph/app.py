"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from cidgraph.adapters.gateway import ContentAddressResolver
from cidgraph.adapters.manifest import SchemaManifestClient
from cidgraph.config import get_gateway_config, get_storage_config
from cidgraph.domain.comparison import (
    ComparisonContext,
    GraphComparator,
    MultiComparisonResult,
)
from cidgraph.domain.errors import GraphError
from cidgraph.domain.materializer import GraphMaterializer, TransactionItem
from cidgraph.domain.references import require_reference

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

    from cidgraph.adapters.http_resilience import ResilientClient
    from cidgraph.config import GatewayConfig, ResilienceConfig
    from cidgraph.domain.ports import LabelLookup

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SubmissionGroup:
    refs: Sequence[str]
    context: ComparisonContext | None = None


def reconstruct_graph(
    root_ref: str,
    *,
    output_dir: str | Path | None = None,
    gateway_url: str | None = None,
    max_requests_per_second: float | None = None,
    use_manifest: bool = True,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> Path:
    """Materialize the graph below ``root_ref`` and return its directory."""

    require_reference(root_ref)
    config = get_gateway_config(
        gateway_url=gateway_url,
        max_requests_per_second=max_requests_per_second,
    )
    data_root = get_storage_config(data_dir=output_dir).ensure_data_dir()

    async def run() -> Path:
        labels = await _load_labels(config, client_factory) if use_manifest else None
        async with ContentAddressResolver(config=config, client_factory=client_factory) as resolver:
            materializer = GraphMaterializer(fetcher=resolver, labels=labels)
            return await materializer.reconstruct(root_ref, data_root)

    return asyncio.run(run())


def reconstruct_items(
    items: Iterable[TransactionItem],
    *,
    output_dir: str | Path | None = None,
    gateway_url: str | None = None,
    max_requests_per_second: float | None = None,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> list[Path]:
    """Materialize decoded submission items, one directory per group."""

    config = get_gateway_config(
        gateway_url=gateway_url,
        max_requests_per_second=max_requests_per_second,
    )
    data_root = get_storage_config(data_dir=output_dir).ensure_data_dir()

    async def run() -> list[Path]:
        async with ContentAddressResolver(config=config, client_factory=client_factory) as resolver:
            materializer = GraphMaterializer(fetcher=resolver)
            return await materializer.reconstruct_from_items(items, data_root)

    return asyncio.run(run())


def compare_submissions(
    refs: Sequence[str],
    *,
    context: ComparisonContext | None = None,
    gateway_url: str | None = None,
    max_requests_per_second: float | None = None,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> MultiComparisonResult:
    """Compare submitted roots that should describe the same record."""

    config = get_gateway_config(
        gateway_url=gateway_url,
        max_requests_per_second=max_requests_per_second,
    )

    async def run() -> MultiComparisonResult:
        async with ContentAddressResolver(config=config, client_factory=client_factory) as resolver:
            return await GraphComparator(fetcher=resolver).compare_roots(refs, context)

    return asyncio.run(run())


def compare_submission_groups(
    groups: Iterable[SubmissionGroup],
    *,
    gateway_url: str | None = None,
    max_requests_per_second: float | None = None,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> list[MultiComparisonResult]:
    """Compare several batches on one resolver, clearing its cache between batches.

    A batch that fails is logged and left out of the results.
    """

    config = get_gateway_config(
        gateway_url=gateway_url,
        max_requests_per_second=max_requests_per_second,
    )

    async def run() -> list[MultiComparisonResult]:
        results: list[MultiComparisonResult] = []
        async with ContentAddressResolver(config=config, client_factory=client_factory) as resolver:
            comparator = GraphComparator(fetcher=resolver)
            for group in groups:
                try:
                    results.append(await comparator.compare_roots(group.refs, group.context))
                except GraphError as exc:
                    log.error("Comparison failed for %s: %s", list(group.refs), exc)
                finally:
                    resolver.clear_cache()
        return results

    return asyncio.run(run())


async def _load_labels(
    config: GatewayConfig,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None,
) -> LabelLookup:
    client = SchemaManifestClient(manifest_url=config.manifest_url, client_factory=client_factory)
    return await client.load()
