from __future__ import annotations

from pathlib import Path

import pytest

from cidgraph.domain.comparison import ComparisonContext, MultiComparisonResult
from cidgraph.domain.errors import NetworkError
from cidgraph.domain.materializer import TransactionItem
from cidgraph.ui import cli as cli_module
from tests.support.graphs import make_hex, make_ref

REF_A = make_ref("a")
REF_B = make_ref("b")


def test_reconstruct_forwards_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_reconstruct(root_ref: str, **kwargs: object) -> Path:
        captured["root_ref"] = root_ref
        captured.update(kwargs)
        return Path("data") / root_ref

    monkeypatch.setattr(cli_module, "reconstruct_graph", fake_reconstruct)

    cli_module.main(
        [
            "--gateway",
            "https://ipfs.example/ipfs",
            "reconstruct",
            REF_A,
            "--output-dir",
            "out",
            "--no-manifest",
        ]
    )

    assert captured == {
        "root_ref": REF_A,
        "output_dir": "out",
        "gateway_url": "https://ipfs.example/ipfs",
        "max_requests_per_second": None,
        "use_manifest": False,
    }


def test_reconstruct_rejects_invalid_reference(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_reconstruct(*_: object, **__: object) -> Path:
        raise AssertionError("should not be called")

    monkeypatch.setattr(cli_module, "reconstruct_graph", fake_reconstruct)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["reconstruct", "not-a-reference"])

    assert excinfo.value.code == 2


def test_reconstruct_items_parses_items(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_reconstruct_items(items: list[TransactionItem], **kwargs: object) -> list[Path]:
        captured["items"] = items
        captured.update(kwargs)
        return []

    monkeypatch.setattr(cli_module, "reconstruct_items", fake_reconstruct_items)

    cli_module.main(
        ["reconstruct-items", "--item", f"{make_hex('g')}:{make_hex('i')}:{REF_A}"]
    )

    assert captured["items"] == [
        TransactionItem(group_key=make_hex("g"), item_key=make_hex("i"), content_ref=REF_A)
    ]
    assert captured["output_dir"] is None


def test_reconstruct_items_rejects_malformed_item() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["reconstruct-items", "--item", "only:two"])

    assert excinfo.value.code == 2


def test_compare_prints_summary(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_compare(refs: list[str], **kwargs: object) -> MultiComparisonResult:
        captured["refs"] = refs
        captured.update(kwargs)
        return MultiComparisonResult(
            roots=refs,
            pairwise_comparisons=[],
            summary="All 2 submissions are identical",
            total_differences=0,
        )

    monkeypatch.setattr(cli_module, "compare_submissions", fake_compare)

    cli_module.main(["compare", REF_A, REF_B, "--group-key", "0xgroup"])

    assert capsys.readouterr().out == "All 2 submissions are identical\n"
    assert captured["refs"] == [REF_A, REF_B]
    assert captured["context"] == ComparisonContext(group_key="0xgroup", item_key=None)


def test_compare_requires_two_references() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["compare", REF_A])

    assert excinfo.value.code == 2


def test_fatal_errors_exit_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_compare(*_: object, **__: object) -> MultiComparisonResult:
        raise NetworkError("HTTP 500", reference=REF_A, status_code=500)

    monkeypatch.setattr(cli_module, "compare_submissions", failing_compare)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["compare", REF_A, REF_B])

    assert excinfo.value.code == 1


def test_max_rps_is_forwarded(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_compare(refs: list[str], **kwargs: object) -> MultiComparisonResult:
        captured.update(kwargs)
        return MultiComparisonResult(
            roots=refs,
            pairwise_comparisons=[],
            summary="",
            total_differences=0,
        )

    monkeypatch.setattr(cli_module, "compare_submissions", fake_compare)

    cli_module.main(["--max-rps", "2.5", "compare", REF_A, REF_B])

    assert captured["max_requests_per_second"] == 2.5


def test_max_rps_must_be_positive() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["--max-rps", "0", "compare", REF_A, REF_B])

    assert excinfo.value.code == 2
