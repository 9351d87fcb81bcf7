"""Ports the resolution services depend on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .json_values import JsonValue


@runtime_checkable
class ContentFetcher(Protocol):
    """Fetches and decodes the JSON stored under a content reference."""

    async def fetch(self, reference: str) -> JsonValue: ...


@runtime_checkable
class LabelLookup(Protocol):
    """Maps a data group label to the reference used as its root filename."""

    def data_group_ref(self, label: str) -> str | None: ...


__all__ = ["ContentFetcher", "LabelLookup"]
