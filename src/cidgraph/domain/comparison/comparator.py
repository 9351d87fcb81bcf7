"""Compare several submitted roots that should describe the same record."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from logging import getLogger
from typing import TYPE_CHECKING

from cidgraph.domain.errors import GraphError, InsufficientInputsError
from cidgraph.domain.references import require_reference

from .diff import ComparisonResult, compare_documents
from .inline import resolve_inline
from .summary import summarize

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cidgraph.domain.json_values import JsonValue
    from cidgraph.domain.ports import ContentFetcher

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ComparisonContext:
    """Correlation identifiers carried into the result for labelling only."""

    group_key: str | None = None
    item_key: str | None = None


@dataclass(frozen=True, slots=True)
class MultiComparisonResult:
    roots: list[str]
    pairwise_comparisons: list[ComparisonResult]
    summary: str
    total_differences: int
    context: ComparisonContext | None = None


class GraphComparator:
    """Inline each root completely, then diff every pair of roots."""

    def __init__(self, *, fetcher: ContentFetcher) -> None:
        self._fetcher = fetcher

    async def resolve_inline(self, reference: str) -> JsonValue:
        return await resolve_inline(reference, self._fetcher)

    async def compare_roots(
        self,
        refs: Sequence[str],
        context: ComparisonContext | None = None,
    ) -> MultiComparisonResult:
        """Compare ``refs`` pairwise.

        Needs at least two references. Every root must resolve completely: a
        single failed fetch aborts the comparison.
        """

        if len(refs) < 2:
            raise InsufficientInputsError("At least 2 references are required for comparison")
        roots = [require_reference(ref) for ref in refs]

        log.info("Comparing %s references%s", len(roots), _context_label(context))

        documents: list[JsonValue] = []
        for root in roots:
            try:
                documents.append(await self.resolve_inline(root))
            except GraphError as exc:
                log.error("Failed to resolve %s: %s", root, exc)
                raise
            log.debug("Resolved %s", root)

        pairwise: list[ComparisonResult] = [
            compare_documents(roots[i], documents[i], roots[j], documents[j])
            for i, j in combinations(range(len(roots)), 2)
        ]
        total = sum(comparison.difference_count for comparison in pairwise)

        return MultiComparisonResult(
            roots=roots,
            pairwise_comparisons=pairwise,
            summary=summarize(roots, pairwise),
            total_differences=total,
            context=context,
        )


def _context_label(context: ComparisonContext | None) -> str:
    if context is None:
        return ""
    parts = [
        f"{name} {value[:10]}..."
        for name, value in (("group", context.group_key), ("item", context.item_key))
        if value
    ]
    return f" for {', '.join(parts)}" if parts else ""
