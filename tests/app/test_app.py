from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from cidgraph.app import (
    SubmissionGroup,
    compare_submission_groups,
    compare_submissions,
    reconstruct_graph,
    reconstruct_items,
)
from cidgraph.domain.comparison import ComparisonContext
from cidgraph.domain.errors import InvalidReferenceError, ManifestError
from cidgraph.domain.materializer import TransactionItem
from tests.support.graphs import DocumentServer, make_hex, make_ref

if TYPE_CHECKING:
    from pathlib import Path

    from cidgraph.domain.json_values import JsonValue

MANIFEST_URL = "https://lexicon.test/schema-manifest.json"
ROOT = make_ref("root")
OWNER = make_ref("owner")
COUNTY = make_ref("county-data-group")

MANIFEST: dict[str, JsonValue] = {
    "County": {"ipfsCid": COUNTY, "type": "dataGroup"},
    "County_Record": {"ipfsCid": make_ref("county-class"), "type": "class"},
}
DOCUMENTS: dict[str, JsonValue] = {
    ROOT: {"label": "County", "relationships": {"owner": {"/": OWNER}}},
    OWNER: {"name": "Jane"},
}


def test_reconstruct_graph_names_root_after_data_group(tmp_path: Path) -> None:
    server = DocumentServer(DOCUMENTS, extra={MANIFEST_URL: MANIFEST})

    data_dir = reconstruct_graph(
        ROOT,
        output_dir=tmp_path,
        client_factory=server.client_factory(),
    )

    assert data_dir == tmp_path.resolve() / ROOT
    assert sorted(path.name for path in data_dir.iterdir()) == sorted(
        [f"{COUNTY}.json", "owner.json"]
    )
    root_file = json.loads((data_dir / f"{COUNTY}.json").read_text(encoding="utf-8"))
    assert root_file["relationships"] == {"owner": {"path": "./owner.json"}}
    assert server.fetched == [ROOT, OWNER]
    assert str(server.requests[0].url) == f"https://gateway.test/ipfs/{ROOT}"


def test_reconstruct_graph_without_manifest(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CIDGRAPH_DATA_DIR", str(tmp_path / "graphs"))
    server = DocumentServer(DOCUMENTS)

    data_dir = reconstruct_graph(ROOT, use_manifest=False, client_factory=server.client_factory())

    assert data_dir == (tmp_path / "graphs").resolve() / ROOT
    assert (data_dir / f"{ROOT}.json").exists()


def test_reconstruct_graph_rejects_invalid_root(tmp_path: Path) -> None:
    server = DocumentServer(DOCUMENTS, extra={MANIFEST_URL: MANIFEST})

    with pytest.raises(InvalidReferenceError):
        reconstruct_graph("bad-root", output_dir=tmp_path, client_factory=server.client_factory())

    assert server.requests == []


def test_reconstruct_graph_fails_when_manifest_is_unavailable(tmp_path: Path) -> None:
    server = DocumentServer(DOCUMENTS)

    with pytest.raises(ManifestError):
        reconstruct_graph(ROOT, output_dir=tmp_path, client_factory=server.client_factory())


def test_reconstruct_items(tmp_path: Path) -> None:
    server = DocumentServer(DOCUMENTS)
    items = [
        TransactionItem(group_key=make_hex("group"), item_key=make_hex("item"), content_ref=ROOT),
    ]

    directories = reconstruct_items(
        items,
        output_dir=tmp_path,
        client_factory=server.client_factory(),
    )

    group_dir = tmp_path.resolve() / make_ref("group")
    assert directories == [group_dir]
    assert (group_dir / f"{make_ref('item')}.json").exists()
    assert (group_dir / "owner.json").exists()


def test_compare_submissions_end_to_end() -> None:
    other = make_ref("other")
    documents: dict[str, JsonValue] = {
        **DOCUMENTS,
        other: {"label": "County", "relationships": {"owner": {"name": "Jane"}}},
    }
    server = DocumentServer(documents)
    context = ComparisonContext(group_key="0xgroup")

    result = compare_submissions(
        [ROOT, other],
        context=context,
        client_factory=server.client_factory(),
    )

    assert result.total_differences == 0
    assert result.summary == "All 2 submissions are identical"
    assert result.context is context


def test_compare_submission_groups_clears_cache_between_groups() -> None:
    first, second = make_ref("first"), make_ref("second")
    missing = make_ref("missing")
    documents: dict[str, JsonValue] = {
        **DOCUMENTS,
        first: {"owner": {"/": OWNER}, "value": 1},
        second: {"owner": {"/": OWNER}, "value": 2},
    }
    server = DocumentServer(documents)
    groups = [
        SubmissionGroup(refs=[first, second]),
        SubmissionGroup(refs=[first, missing]),
        SubmissionGroup(refs=[ROOT, first], context=ComparisonContext(item_key="0xitem")),
    ]

    results = compare_submission_groups(groups, client_factory=server.client_factory())

    assert [result.roots for result in results] == [[first, second], [ROOT, first]]
    assert results[0].total_differences == 1
    assert results[1].context == ComparisonContext(item_key="0xitem")
    assert server.fetched.count(first) == 3
    assert server.fetched.count(OWNER) == 3


def test_rate_limited_gateway_still_materializes(tmp_path: Path) -> None:
    server = DocumentServer(DOCUMENTS)

    data_dir = reconstruct_graph(
        ROOT,
        output_dir=tmp_path,
        use_manifest=False,
        max_requests_per_second=1000.0,
        client_factory=server.client_factory(),
    )

    assert server.fetched == [ROOT, OWNER]
    assert (data_dir / "owner.json").exists()
