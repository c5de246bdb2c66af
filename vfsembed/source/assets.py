from __future__ import annotations

import errno
import os
from typing import BinaryIO, List

from vfsembed.source.base import EntryInfo, clean_path


class AssetsSource:
    """Use a generated assets filesystem as the source of another build."""

    def __init__(self, fs):
        self.fs = fs

    def stat(self, path: str) -> EntryInfo:
        return _entry_from_record(self.fs.stat(clean_path(path)))

    def list(self, path: str) -> List[EntryInfo]:
        path = clean_path(path)
        record = self.fs.stat(path)
        if not record.is_dir():
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)
        with self.fs.open(path) as handle:
            return [_entry_from_record(child) for child in handle.readdir(0)]

    def open(self, path: str) -> BinaryIO:
        path = clean_path(path)
        if self.fs.stat(path).is_dir():
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)
        return self.fs.open(path)

    def __repr__(self) -> str:
        return f"AssetsSource({self.fs!r})"


def _entry_from_record(record) -> EntryInfo:
    return EntryInfo(
        name=record.name,
        is_dir=record.is_dir(),
        size=record.size,
        mod_time=record.mod_time,
    )
