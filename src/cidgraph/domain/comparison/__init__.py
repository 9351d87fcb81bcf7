"""Inline, diff and summarize independently submitted graphs."""

from __future__ import annotations

from .comparator import ComparisonContext, GraphComparator, MultiComparisonResult
from .diff import (
    MISSING,
    ChangeType,
    ComparisonResult,
    DifferenceDetail,
    compare_documents,
    diff_documents,
    format_path,
    format_value,
)
from .inline import resolve_inline
from .summary import format_summary_value, group_by_path, summarize

__all__ = [
    "MISSING",
    "ChangeType",
    "ComparisonContext",
    "ComparisonResult",
    "DifferenceDetail",
    "GraphComparator",
    "MultiComparisonResult",
    "compare_documents",
    "diff_documents",
    "format_path",
    "format_summary_value",
    "format_value",
    "group_by_path",
    "resolve_inline",
    "summarize",
]
