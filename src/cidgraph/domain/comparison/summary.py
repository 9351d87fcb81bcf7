"""Human-readable summary of a multi-way comparison."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Literal

from cidgraph.domain.json_values import link_target

from .diff import MISSING, truncate

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cidgraph.domain.json_values import JsonValue

    from .diff import ComparisonResult, _Missing

MAX_PATHS_SHOWN: Final[int] = 10
MAX_INLINE_VALUES: Final[int] = 4
SAMPLE_VALUES: Final[int] = 3
SUMMARY_VALUE_LIMIT: Final[int] = 100
_SHORT_REF_LENGTH: Final[int] = 8


@dataclass(slots=True)
class PathDifferences:
    """Values seen at one path, keyed by the root that showed them."""

    values: dict[str, JsonValue | Literal[_Missing.MISSING]] = field(default_factory=dict)
    comparisons: int = 0


def group_by_path(comparisons: Sequence[ComparisonResult]) -> dict[str, PathDifferences]:
    by_path: dict[str, PathDifferences] = {}
    for comparison in comparisons:
        for difference in comparison.differences:
            entry = by_path.setdefault(difference.path, PathDifferences())
            entry.values[comparison.ref1] = difference.old_value
            entry.values[comparison.ref2] = difference.new_value
            entry.comparisons += 1
    return by_path


def summarize(roots: Sequence[str], comparisons: Sequence[ComparisonResult]) -> str:
    if all(not comparison.has_differences for comparison in comparisons):
        return f"All {len(roots)} submissions are identical"

    label = "references" if len(roots) == 2 else "unique references"
    lines = [
        f"Compared {len(roots)} submissions ({label}: "
        f"{', '.join(short_ref(root) for root in roots)}):",
        "",
    ]

    by_path = group_by_path(comparisons)
    ranked = sorted(by_path.items(), key=lambda item: item[1].comparisons, reverse=True)

    lines.extend(["DIFFERENCES FOUND:", ""])
    for path, entry in ranked[:MAX_PATHS_SHOWN]:
        lines.append(f"Path: {path}")
        observed = list(entry.values.items())
        if len(observed) <= MAX_INLINE_VALUES:
            lines.append("  Values across submissions:")
        else:
            lines.append(f"  {len(observed)} different values found")
            lines.append("  Sample values:")
            observed = observed[:SAMPLE_VALUES]
        lines.extend(
            f"    - {short_ref(root)}: {format_summary_value(value)}" for root, value in observed
        )
        lines.append("")

    if len(ranked) > MAX_PATHS_SHOWN:
        lines.append(f"... and {len(ranked) - MAX_PATHS_SHOWN} more paths with differences")
        lines.append("")

    total = sum(comparison.difference_count for comparison in comparisons)
    lines.extend(
        [
            "SUMMARY STATISTICS:",
            f"  - Total differences: {total}",
            f"  - Unique paths with differences: {len(by_path)}",
            f"  - Pairwise comparisons: {len(comparisons)}",
        ]
    )
    return "\n".join(lines)


def short_ref(reference: str) -> str:
    return f"...{reference[-_SHORT_REF_LENGTH:]}"


def format_summary_value(value: JsonValue | Literal[_Missing.MISSING]) -> str:
    if value is MISSING:
        return "undefined (field missing)"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{truncate(value, SUMMARY_VALUE_LIMIT)}"'
    if isinstance(value, list):
        return f"[Array with {len(value)} items]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        target = link_target(value)
        if target is not None:
            return f'{{"/": "{target}"}}'
        keys = list(value)
        more = "..." if len(keys) > SAMPLE_VALUES else ""
        return f"{{Object with {len(keys)} keys: {', '.join(keys[:SAMPLE_VALUES])}{more}}}"
    return str(value)
