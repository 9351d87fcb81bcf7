"""Structural differences between two inlined documents."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import TYPE_CHECKING, Final, Literal

if TYPE_CHECKING:
    from cidgraph.domain.json_values import JsonValue

DETAIL_VALUE_LIMIT: Final[int] = 50
ROOT_PATH: Final[str] = "(root)"


class ChangeType(StrEnum):
    ADD = "ADD"
    UPDATE = "UPDATE"
    REMOVE = "REMOVE"


class _Missing(Enum):
    MISSING = "missing"


MISSING: Final = _Missing.MISSING
"""Marks the side of a difference where the field does not exist."""


@dataclass(frozen=True, slots=True)
class DifferenceDetail:
    path: str
    type: ChangeType
    description: str
    old_value: JsonValue | Literal[_Missing.MISSING] = MISSING
    new_value: JsonValue | Literal[_Missing.MISSING] = MISSING


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    ref1: str
    ref2: str
    differences: list[DifferenceDetail] = field(default_factory=list[DifferenceDetail])

    @property
    def difference_count(self) -> int:
        return len(self.differences)

    @property
    def has_differences(self) -> bool:
        return bool(self.differences)


def compare_documents(
    ref1: str,
    document1: JsonValue,
    ref2: str,
    document2: JsonValue,
) -> ComparisonResult:
    return ComparisonResult(ref1=ref1, ref2=ref2, differences=diff_documents(document1, document2))


def diff_documents(old: JsonValue, new: JsonValue) -> list[DifferenceDetail]:
    """Return the differences turning ``old`` into ``new``.

    Objects are compared key by key (removals and updates in ``old`` order,
    then additions in ``new`` order), arrays index by index. Anything else,
    including a change of container type, is a single UPDATE.
    """

    differences: list[DifferenceDetail] = []
    _diff(old, new, (), differences)
    return differences


def _diff(
    old: JsonValue,
    new: JsonValue,
    path: tuple[str | int, ...],
    out: list[DifferenceDetail],
) -> None:
    if isinstance(old, dict) and isinstance(new, dict):
        for key, old_item in old.items():
            if key in new:
                _diff(old_item, new[key], (*path, key), out)
            else:
                out.append(_removed((*path, key), old_item))
        out.extend(
            _added((*path, key), new_item) for key, new_item in new.items() if key not in old
        )
        return

    if isinstance(old, list) and isinstance(new, list):
        for index, (old_item, new_item) in enumerate(zip(old, new, strict=False)):
            _diff(old_item, new_item, (*path, index), out)
        out.extend(_removed((*path, index), old[index]) for index in range(len(new), len(old)))
        out.extend(_added((*path, index), new[index]) for index in range(len(old), len(new)))
        return

    if not _same_value(old, new):
        out.append(
            DifferenceDetail(
                path=format_path(path),
                type=ChangeType.UPDATE,
                description=f"Changed from {format_value(old)} to {format_value(new)}",
                old_value=old,
                new_value=new,
            )
        )


def _added(path: tuple[str | int, ...], value: JsonValue) -> DifferenceDetail:
    return DifferenceDetail(
        path=format_path(path),
        type=ChangeType.ADD,
        description=f"Added: {format_value(value)}",
        new_value=value,
    )


def _removed(path: tuple[str | int, ...], value: JsonValue) -> DifferenceDetail:
    return DifferenceDetail(
        path=format_path(path),
        type=ChangeType.REMOVE,
        description=f"Removed: {format_value(value)}",
        old_value=value,
    )


def _same_value(old: JsonValue, new: JsonValue) -> bool:
    # bool is an int subclass; true must not equal 1
    if isinstance(old, bool) or isinstance(new, bool):
        return type(old) is type(new) and old == new
    return old == new


def format_path(path: tuple[str | int, ...]) -> str:
    if not path:
        return ROOT_PATH
    parts: list[str] = []
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif parts:
            parts.append(f".{segment}")
        else:
            parts.append(segment)
    return "".join(parts)


def format_value(
    value: JsonValue | Literal[_Missing.MISSING],
    *,
    limit: int = DETAIL_VALUE_LIMIT,
) -> str:
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{truncate(value, limit)}"'
    if isinstance(value, dict | list):
        return truncate(json.dumps(value, ensure_ascii=False, separators=(",", ":")), limit)
    return str(value)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}..."
