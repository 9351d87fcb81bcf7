"""Inline every link pointer of a graph into one self-contained document."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cidgraph.domain.json_values import link_pointer, link_target
from cidgraph.domain.references import is_valid_reference

if TYPE_CHECKING:
    from cidgraph.domain.json_values import JsonValue
    from cidgraph.domain.ports import ContentFetcher


async def resolve_inline(reference: str, fetcher: ContentFetcher) -> JsonValue:
    """Fetch ``reference`` and replace each pointer below it by its content.

    A reference seen before while inlining this root is kept as a ``{"/": ref}``
    marker instead of being fetched again, so cycles terminate. Fetch errors
    propagate.
    """

    visited = {reference}
    content = await fetcher.fetch(reference)
    return await _inline(content, fetcher, visited)


async def _inline(value: JsonValue, fetcher: ContentFetcher, visited: set[str]) -> JsonValue:
    target = link_target(value)
    if target is not None and is_valid_reference(target):
        if target in visited:
            return link_pointer(target)
        visited.add(target)
        content = await fetcher.fetch(target)
        return await _inline(content, fetcher, visited)

    if isinstance(value, dict):
        return {key: await _inline(item, fetcher, visited) for key, item in value.items()}
    if isinstance(value, list):
        return [await _inline(item, fetcher, visited) for item in value]
    return value
