"""Pydantic models describing the schema manifest payload."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field, RootModel

DATA_GROUP: Final[str] = "dataGroup"


class ManifestEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ipfs_cid: str = Field(alias="ipfsCid")
    type: str


class SchemaManifest(RootModel[dict[str, ManifestEntry]]):
    """Manifest keyed by schema name, e.g. ``Photo_Metadata``."""

    @property
    def data_group_count(self) -> int:
        return sum(1 for entry in self.root.values() if entry.type == DATA_GROUP)

    def data_group_ref(self, label: str) -> str | None:
        """Return the reference of the data group whose name reads as ``label``.

        Names are compared with underscores replaced by spaces, so the label
        ``Photo Metadata`` matches the entry ``Photo_Metadata``.
        """

        for name, entry in self.root.items():
            if entry.type == DATA_GROUP and name.replace("_", " ") == label:
                return entry.ipfs_cid
        return None
