from __future__ import annotations

import posixpath
from datetime import datetime
from typing import BinaryIO, NamedTuple, Protocol, Sequence


class EntryInfo(NamedTuple):
    name: str
    is_dir: bool
    size: int
    mod_time: datetime


class SourceFS(Protocol):
    """Read-only view over the tree being embedded.

    Paths are absolute and slash-separated, with ``/`` as the root. Every
    method raises ``OSError`` when the backing store cannot serve the request.
    """

    def stat(self, path: str) -> EntryInfo:
        ...

    def list(self, path: str) -> Sequence[EntryInfo]:
        ...

    def open(self, path: str) -> BinaryIO:
        ...


def join_path(parent: str, name: str) -> str:
    return posixpath.join(parent, name)


def base_name(path: str) -> str:
    if path == "/":
        return "/"
    return posixpath.basename(path.rstrip("/"))


def clean_path(path: str) -> str:
    cleaned = posixpath.normpath("/" + path.lstrip("/"))
    # normpath keeps a leading "//" intact
    return "/" + cleaned.lstrip("/")
