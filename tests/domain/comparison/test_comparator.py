from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from cidgraph.domain.comparison import (
    ChangeType,
    ComparisonContext,
    GraphComparator,
    MultiComparisonResult,
)
from cidgraph.domain.errors import InsufficientInputsError, InvalidReferenceError, NetworkError
from tests.support.graphs import FakeFetcher, make_ref

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cidgraph.domain.json_values import JsonValue

OWNER = make_ref("owner")


def _compare(
    documents: dict[str, JsonValue],
    refs: Sequence[str],
    context: ComparisonContext | None = None,
) -> tuple[MultiComparisonResult, FakeFetcher]:
    fetcher = FakeFetcher(documents)
    comparator = GraphComparator(fetcher=fetcher)
    return asyncio.run(comparator.compare_roots(refs, context)), fetcher


def test_single_update_between_two_roots() -> None:
    first, second = make_ref("first"), make_ref("second")

    result, _ = _compare({first: {"a": 1}, second: {"a": 2}}, [first, second])

    assert result.total_differences == 1
    (comparison,) = result.pairwise_comparisons
    (difference,) = comparison.differences
    assert (difference.path, difference.type) == ("a", ChangeType.UPDATE)
    assert (difference.old_value, difference.new_value) == (1, 2)


def test_every_pair_is_compared_once() -> None:
    refs = [make_ref(f"root-{index}") for index in range(4)]
    documents: dict[str, JsonValue] = {ref: {"value": index} for index, ref in enumerate(refs)}

    result, _ = _compare(documents, refs)

    assert len(result.pairwise_comparisons) == 6
    assert [(c.ref1, c.ref2) for c in result.pairwise_comparisons] == [
        (refs[0], refs[1]),
        (refs[0], refs[2]),
        (refs[0], refs[3]),
        (refs[1], refs[2]),
        (refs[1], refs[3]),
        (refs[2], refs[3]),
    ]
    assert result.total_differences == 6
    assert result.roots == refs


def test_identical_graphs_report_no_differences() -> None:
    refs = [make_ref(f"same-{index}") for index in range(3)]
    documents: dict[str, JsonValue] = {
        ref: {"relationships": {"owner": {"/": OWNER}}} for ref in refs
    }
    documents[OWNER] = {"name": "Jane"}

    result, _ = _compare(documents, refs)

    assert result.total_differences == 0
    assert result.summary == "All 3 submissions are identical"


def test_linked_content_is_inlined_before_diffing() -> None:
    first, second = make_ref("first"), make_ref("second")
    other_owner = make_ref("other-owner")
    documents: dict[str, JsonValue] = {
        first: {"relationships": {"owner": {"/": OWNER}}},
        second: {"relationships": {"owner": {"/": other_owner}}},
        OWNER: {"name": "Jane"},
        other_owner: {"name": "John"},
    }

    result, _ = _compare(documents, [first, second])

    (difference,) = result.pairwise_comparisons[0].differences
    assert difference.path == "relationships.owner.name"
    assert difference.description == 'Changed from "Jane" to "John"'


def test_resolve_inline_marks_cycles() -> None:
    root = make_ref("cyclic")
    documents: dict[str, JsonValue] = {
        root: {"next": {"/": OWNER}, "file": {"/": "./deed.json"}},
        OWNER: {"back": {"/": root}, "self": {"/": OWNER}},
    }
    fetcher = FakeFetcher(documents)

    inlined = asyncio.run(GraphComparator(fetcher=fetcher).resolve_inline(root))

    assert inlined == {
        "next": {"back": {"/": root}, "self": {"/": OWNER}},
        "file": {"/": "./deed.json"},
    }
    assert fetcher.fetched == [root, OWNER]


def test_fewer_than_two_roots_is_rejected_before_fetching() -> None:
    fetcher = FakeFetcher({})

    with pytest.raises(InsufficientInputsError):
        asyncio.run(GraphComparator(fetcher=fetcher).compare_roots([make_ref("alone")]))

    assert fetcher.fetched == []


def test_invalid_root_is_rejected() -> None:
    with pytest.raises(InvalidReferenceError):
        _compare({}, [make_ref("ok"), "not-a-reference"])


def test_fetch_error_aborts_comparison() -> None:
    first, second = make_ref("first"), make_ref("second")
    documents: dict[str, JsonValue] = {
        first: {"a": 1},
        second: {"owner": {"/": OWNER}},
    }

    with pytest.raises(NetworkError) as excinfo:
        _compare(documents, [first, second])

    assert excinfo.value.reference == OWNER


def test_context_is_carried_into_result() -> None:
    first, second = make_ref("first"), make_ref("second")
    context = ComparisonContext(group_key="0xgroup", item_key="0xitem")

    result, _ = _compare({first: {}, second: {}}, [first, second], context)

    assert result.context is context
