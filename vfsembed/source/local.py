from __future__ import annotations

import logging
import os
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, List

from vfsembed.source.base import EntryInfo, base_name, clean_path

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class LocalSource:
    """Serve a directory on disk as a source tree rooted at ``/``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def stat(self, path: str) -> EntryInfo:
        st = os.stat(self._resolve(path))
        return _entry_from_stat(base_name(clean_path(path)), st)

    def list(self, path: str) -> List[EntryInfo]:
        entries: list[EntryInfo] = []
        with os.scandir(self._resolve(path)) as it:
            for entry in it:
                if entry.is_symlink() and entry.is_dir():
                    logger.warning("Skipping symlinked directory %s", entry.path)
                    continue
                try:
                    entries.append(_entry_from_stat(entry.name, entry.stat()))
                except OSError:
                    # The walker stats each child itself and reports failures.
                    entries.append(EntryInfo(entry.name, entry.is_dir(), 0, _EPOCH))
        return entries

    def open(self, path: str) -> BinaryIO:
        return open(self._resolve(path), "rb")

    def _resolve(self, path: str) -> Path:
        relative = clean_path(path).lstrip("/")
        return self.root / relative if relative else self.root

    def __repr__(self) -> str:
        return f"LocalSource({str(self.root)!r})"


def _entry_from_stat(name: str, st: os.stat_result) -> EntryInfo:
    is_dir = stat.S_ISDIR(st.st_mode)
    return EntryInfo(
        name=name,
        is_dir=is_dir,
        size=0 if is_dir else st.st_size,
        mod_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
    )
