"""Output storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_DATA_DIR_NAME: Final[str] = "data"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir


def get_storage_config(*, data_dir: str | Path | None = None) -> StorageConfig:
    if data_dir is not None:
        return StorageConfig(data_dir=Path(data_dir))
    env_dir = os.getenv("CIDGRAPH_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else Path(DEFAULT_DATA_DIR_NAME))
