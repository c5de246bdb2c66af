from __future__ import annotations

import errno
import io
import os
import posixpath
from datetime import datetime, timezone
from typing import BinaryIO, Dict, Iterable, List, Mapping, Optional

from vfsembed.source.base import EntryInfo, base_name, clean_path

DEFAULT_MOD_TIME = datetime(2000, 1, 1, tzinfo=timezone.utc)


class MemorySource:
    """An in-memory source tree built from ``{path: bytes}``.

    Parent directories are created implicitly. ``dirs`` adds directories
    that hold no files. Every entry shares ``mod_time`` unless
    ``mod_times`` overrides it per path.
    """

    def __init__(
        self,
        files: Mapping[str, bytes],
        *,
        dirs: Iterable[str] = (),
        mod_time: datetime = DEFAULT_MOD_TIME,
        mod_times: Optional[Mapping[str, datetime]] = None,
    ):
        self._files: Dict[str, bytes] = {}
        self._children: Dict[str, set[str]] = {"/": set()}
        self._mod_time = mod_time
        self._mod_times = {clean_path(p): t for p, t in (mod_times or {}).items()}

        for path in dirs:
            self._add_dir(clean_path(path))

        for path, data in files.items():
            path = clean_path(path)
            if path in self._children:
                raise ValueError(f"{path} is already a directory")
            parent = posixpath.dirname(path)
            self._add_dir(parent)
            self._children[parent].add(base_name(path))
            self._files[path] = bytes(data)

    def _add_dir(self, path: str) -> None:
        if path in self._files:
            raise ValueError(f"{path} is already a file")
        if path in self._children:
            return
        parent = posixpath.dirname(path)
        self._add_dir(parent)
        self._children[parent].add(base_name(path))
        self._children[path] = set()

    def stat(self, path: str) -> EntryInfo:
        return self._info(clean_path(path))

    def _info(self, path: str) -> EntryInfo:
        mod_time = self._mod_times.get(path, self._mod_time)
        if path in self._children:
            return EntryInfo(base_name(path), True, 0, mod_time)
        if path in self._files:
            return EntryInfo(base_name(path), False, len(self._files[path]), mod_time)
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)

    def list(self, path: str) -> List[EntryInfo]:
        path = clean_path(path)
        if path in self._files:
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)
        if path not in self._children:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        return [self._info(posixpath.join(path, name)) for name in self._children[path]]

    def open(self, path: str) -> BinaryIO:
        path = clean_path(path)
        if path in self._children:
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)
        if path not in self._files:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        return io.BytesIO(self._files[path])
