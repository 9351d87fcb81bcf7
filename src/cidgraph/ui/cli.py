from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from cidgraph.app import compare_submissions, reconstruct_graph, reconstruct_items
from cidgraph.config import configure_logging
from cidgraph.domain.comparison import ComparisonContext
from cidgraph.domain.materializer import TransactionItem
from cidgraph.domain.references import require_reference

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Materialize and compare content-addressed graphs")
    parser.add_argument(
        "--gateway",
        type=str,
        help="Content gateway base URL (defaults to CIDGRAPH_GATEWAY_URL or Pinata)",
    )
    parser.add_argument(
        "--max-rps",
        type=float,
        help="Space gateway requests to at most this many per second "
        "(defaults to CIDGRAPH_GATEWAY_MAX_RPS, unlimited when unset)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every fetch attempt",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconstruct = subparsers.add_parser("reconstruct", help="Write a graph to local JSON files")
    reconstruct.add_argument("reference", type=str, help="Root content reference")
    reconstruct.add_argument(
        "--output-dir",
        type=str,
        help="Directory receiving the graph (defaults to CIDGRAPH_DATA_DIR or ./data)",
    )
    reconstruct.add_argument(
        "--no-manifest",
        action="store_true",
        help="Do not load the schema manifest; name the root file after its reference",
    )

    items = subparsers.add_parser(
        "reconstruct-items",
        help="Write decoded submission items, one directory per group",
    )
    items.add_argument(
        "--item",
        dest="items",
        action="append",
        required=True,
        metavar="GROUP:ITEM:CONTENT",
        help="Group key, item key and content reference (hex digests or references)",
    )
    items.add_argument(
        "--output-dir",
        type=str,
        help="Directory receiving the groups (defaults to CIDGRAPH_DATA_DIR or ./data)",
    )

    compare = subparsers.add_parser("compare", help="Diff submissions of the same record")
    compare.add_argument("references", nargs="+", help="Two or more root references")
    compare.add_argument("--group-key", type=str, help="Label for the compared record")
    compare.add_argument("--item-key", type=str, help="Label for the compared data group")

    return parser.parse_args(list(argv))


def _parse_item(value: str) -> TransactionItem:
    parts = value.split(":")
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"Invalid item (expected GROUP:ITEM:CONTENT): {value}")
    group_key, item_key, content_ref = parts
    return TransactionItem(group_key=group_key, item_key=item_key, content_ref=content_ref)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        if parsed_args.max_rps is not None and parsed_args.max_rps <= 0:
            raise ValueError("--max-rps must be greater than zero")  # noqa: TRY301
        if parsed_args.command == "reconstruct":
            require_reference(parsed_args.reference)
        elif parsed_args.command == "reconstruct-items":
            parsed_args.items = [_parse_item(value) for value in parsed_args.items]
        elif parsed_args.command == "compare":
            if len(parsed_args.references) < 2:
                raise ValueError("At least 2 references are required")  # noqa: TRY301
            for reference in parsed_args.references:
                require_reference(reference)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "reconstruct":
            data_dir = reconstruct_graph(
                parsed_args.reference,
                output_dir=parsed_args.output_dir,
                gateway_url=parsed_args.gateway,
                max_requests_per_second=parsed_args.max_rps,
                use_manifest=not parsed_args.no_manifest,
            )
            log.info("Graph written to %s", data_dir)
        elif parsed_args.command == "reconstruct-items":
            directories = reconstruct_items(
                parsed_args.items,
                output_dir=parsed_args.output_dir,
                gateway_url=parsed_args.gateway,
                max_requests_per_second=parsed_args.max_rps,
            )
            log.info("Items written to %s directories", len(directories))
        elif parsed_args.command == "compare":
            result = compare_submissions(
                parsed_args.references,
                context=ComparisonContext(
                    group_key=parsed_args.group_key,
                    item_key=parsed_args.item_key,
                ),
                gateway_url=parsed_args.gateway,
                max_requests_per_second=parsed_args.max_rps,
            )
            sys.stdout.write(result.summary + "\n")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
