# Read-only filesystem over gzip-compressed assets held in memory.
#
# This module is copied verbatim into every generated asset module, so it
# must depend on nothing but the standard library.
from __future__ import annotations

import errno
import gzip
import io
import logging
import os
import zlib
from datetime import datetime
from stat import S_IFDIR, S_IFREG
from types import MappingProxyType
from typing import Iterator, List, Mapping, Sequence, Union

_logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


class AssetUsageError(RuntimeError):
    """A handle was used in a way embedded assets never support."""


class CorruptAssetError(RuntimeError):
    """Embedded bytes could not be decompressed."""


def parse_time(text: str) -> datetime:
    return datetime.fromisoformat(text)


class AssetDir:
    """A directory record. It is its own handle and its own stat result."""

    __slots__ = ("name", "mod_time", "entries")

    size = 0
    mode = 0o755 | S_IFDIR

    def __init__(self, name: str, mod_time: datetime, entries: Sequence["AssetInfo"] = ()):
        self.name = name
        self.mod_time = mod_time
        self.entries = tuple(entries)

    def is_dir(self) -> bool:
        return True

    def stat(self) -> "AssetDir":
        return self

    def readdir(self, count: int = 0) -> List["AssetInfo"]:
        if count != 0:
            raise AssetUsageError(
                f"readdir count {count} unsupported on {self.name}; only 0 is"
            )
        return list(self.entries)

    def read(self, size: int = -1) -> bytes:
        raise AssetUsageError(f"cannot read from directory {self.name}")

    def readinto(self, buffer) -> int:
        raise AssetUsageError(f"cannot read from directory {self.name}")

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        raise AssetUsageError(f"cannot seek in directory {self.name}")

    def close(self) -> None:
        pass

    def __enter__(self) -> "AssetDir":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"AssetDir(name={self.name!r}, entries={len(self.entries)})"


class AssetFile:
    """A file record: gzip-compressed content plus its metadata."""

    __slots__ = ("name", "compressed_content", "size", "mod_time")

    mode = 0o444 | S_IFREG

    def __init__(self, name: str, compressed_content: bytes, size: int, mod_time: datetime):
        self.name = name
        self.compressed_content = compressed_content
        self.size = size
        self.mod_time = mod_time

    def is_dir(self) -> bool:
        return False

    def stat(self) -> "AssetFile":
        return self

    def readdir(self, count: int = 0) -> List["AssetInfo"]:
        raise AssetUsageError(f"cannot readdir from file {self.name}")

    def gzip_bytes(self) -> bytes:
        """Return the stored gzip stream, for callers that can serve it as is."""
        _logger.debug("using gzip_bytes for %s", self.name)
        return self.compressed_content

    def __repr__(self) -> str:
        return f"AssetFile(name={self.name!r}, size={self.size})"


AssetInfo = Union[AssetDir, AssetFile]


class AssetFileHandle(io.RawIOBase):
    """An open embedded file, decompressing lazily as it is read."""

    def __init__(self, record: AssetFile):
        super().__init__()
        self._record = record
        self._stream = None
        if record.compressed_content[:2] != _GZIP_MAGIC:
            raise CorruptAssetError(
                f"embedded content of {record.name} is not a gzip stream"
            )
        self._stream = gzip.GzipFile(
            fileobj=io.BytesIO(record.compressed_content),
            mode="rb",
        )

    @property
    def name(self) -> str:
        return self._record.name

    def stat(self) -> AssetFile:
        return self._record

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def read(self, size: int = -1) -> bytes:
        self._check_closed()
        try:
            return self._stream.read(size)
        except (OSError, EOFError, zlib.error) as exc:
            raise CorruptAssetError(
                f"unexpected error reading embedded {self.name}: {exc}"
            ) from exc

    def readall(self) -> bytes:
        return self.read(-1)

    def readinto(self, buffer) -> int:
        self._check_closed()
        try:
            return self._stream.readinto(buffer)
        except (OSError, EOFError, zlib.error) as exc:
            raise CorruptAssetError(
                f"unexpected error reading embedded {self.name}: {exc}"
            ) from exc

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        raise AssetUsageError(
            f"seek is not supported on embedded file {self.name}"
        )

    def readdir(self, count: int = 0) -> List[AssetInfo]:
        raise AssetUsageError(f"cannot readdir from file {self.name}")

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
        super().close()

    def _check_closed(self) -> None:
        if self.closed:
            raise ValueError(f"I/O operation on closed file {self.name}")

    def __repr__(self) -> str:
        return f"AssetFileHandle(name={self.name!r})"


AssetHandle = Union[AssetDir, AssetFileHandle]


class AssetsFS:
    """Read-only mapping of absolute slash paths to embedded records."""

    def __init__(self, assets: Mapping[str, AssetInfo]):
        self._assets = MappingProxyType(dict(assets))

    def open(self, path: str) -> AssetHandle:
        try:
            record = self._assets[path]
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path) from None

        if isinstance(record, AssetFile):
            return AssetFileHandle(record)
        if isinstance(record, AssetDir):
            return record
        raise TypeError(f"unexpected asset record for {path}: {record!r}")

    def stat(self, path: str) -> AssetInfo:
        try:
            return self._assets[path]
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path) from None

    def __contains__(self, path: object) -> bool:
        return path in self._assets

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"AssetsFS({len(self._assets)} entries)"
