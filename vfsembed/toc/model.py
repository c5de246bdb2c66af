from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Union


@dataclass
class DirAsset:
    name: str
    mod_time: datetime
    entries: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FileAsset:
    name: str
    uncompressed_size: int
    mod_time: datetime

    def __post_init__(self) -> None:
        if self.uncompressed_size < 0:
            raise ValueError(
                f"File size cannot be negative: {self.name} ({self.uncompressed_size})"
            )


Asset = Union[DirAsset, FileAsset]


@dataclass(frozen=True)
class PathAsset:
    path: str
    asset: Asset

    @property
    def is_dir(self) -> bool:
        if isinstance(self.asset, DirAsset):
            return True
        if isinstance(self.asset, FileAsset):
            return False
        raise TypeError(f"Unknown asset type for {self.path}: {type(self.asset).__name__}")


def index_toc(toc: List[PathAsset]) -> Dict[str, PathAsset]:
    index: Dict[str, PathAsset] = {}
    for item in toc:
        if item.path in index:
            raise ValueError(f"Duplicate path in table of contents: {item.path}")
        index[item.path] = item
    return index
