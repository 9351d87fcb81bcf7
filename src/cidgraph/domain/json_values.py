"""JSON values as decoded from the content store, and link-pointer detection.

A link pointer is a mapping with exactly one key, ``"/"``, whose value is a
string. Its target is either a content reference or, in already materialized
data, a relative file path. Every other shape is inline data.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final, cast

JsonScalar = str | int | float | bool | None
JsonValue = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject = dict[str, JsonValue]

LINK_KEY: Final[str] = "/"
PATH_KEY: Final[str] = "path"


def link_target(value: object) -> str | None:
    """Return the target of ``value`` when it is a link pointer, else ``None``."""

    match value:
        case {"/": str() as target} if len(cast("Mapping[str, object]", value)) == 1:
            return target
        case _:
            return None


def link_pointer(target: str) -> JsonObject:
    return {LINK_KEY: target}


def path_pointer(relative_path: str) -> JsonObject:
    return {PATH_KEY: relative_path}


def as_object(value: JsonValue) -> JsonObject | None:
    if isinstance(value, dict):
        return value
    return None


def rewrite_links(value: JsonValue, paths: Mapping[str, str]) -> JsonValue:
    """Replace every link pointer whose target is in ``paths`` by a path pointer.

    Pointers with unknown targets are copied unchanged. The input is not mutated.
    """

    target = link_target(value)
    if target is not None:
        if target in paths:
            return path_pointer(paths[target])
        return dict(cast("JsonObject", value))
    if isinstance(value, dict):
        return {key: rewrite_links(item, paths) for key, item in value.items()}
    if isinstance(value, list):
        return [rewrite_links(item, paths) for item in value]
    return value
