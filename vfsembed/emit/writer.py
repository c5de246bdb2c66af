from __future__ import annotations

import gzip
import inspect
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from typing import List, TextIO

from vfsembed import runtime
from vfsembed.config import GenerateConfig
from vfsembed.emit.escape import EscapingWriter
from vfsembed.errors import EmitError
from vfsembed.source.base import SourceFS
from vfsembed.toc.model import DirAsset, FileAsset, PathAsset, index_toc

logger = logging.getLogger(__name__)

DISCLAIMER = "# Code generated by vfsembed; DO NOT EDIT."
BUILD_TAG_PREFIX = "# vfsembed:build"

_RECORD_INDENT = " " * 8
_FIELD_INDENT = " " * 12
_CONTENT_INDENT = " " * 16

# Public classes of the runtime, in definition order.
_RUNTIME_EXPORTS = tuple(
    name
    for name, value in vars(runtime).items()
    if isinstance(value, type)
    and value.__module__ == runtime.__name__
    and not name.startswith("_")
)


@dataclass
class EmitStats:
    directories: int = 0
    files: int = 0
    uncompressed_bytes: int = 0
    compressed_bytes: int = 0


def write_header(out: TextIO, config: GenerateConfig) -> None:
    out.write(f"{DISCLAIMER}\n\n")

    if config.tags:
        out.write(f"{BUILD_TAG_PREFIX} {config.tags}\n\n")

    out.write(
        f'"""Embedded assets for {config.package}.\n'
        f"\n"
        f"``{config.variable_name}`` is a read-only filesystem over the embedded tree.\n"
        f'"""\n\n'
    )


def write_runtime(out: TextIO) -> None:
    source = inspect.getsource(runtime)
    out.write(source.rstrip("\n"))
    out.write("\n")


def write_assets(
    out: TextIO,
    config: GenerateConfig,
    toc: List[PathAsset],
    source: SourceFS,
) -> EmitStats:
    """Serialize ``toc`` as the static data of the generated module.

    The first pass writes one record per path with every scalar field and,
    for files, the gzip-compressed content read from ``source``. The second
    pass links each directory to its children by looking them up in the
    mapping built by the first pass.
    """

    index = index_toc(toc)
    stats = EmitStats()

    out.write("\n\ndef _build_assets() -> AssetsFS:\n")
    out.write("    _assets = {\n")

    for item in toc:
        asset = item.asset
        if isinstance(asset, DirAsset):
            _write_dir(out, item.path, asset)
            stats.directories += 1
        elif isinstance(asset, FileAsset):
            compressed = _write_file(out, item.path, asset, source)
            stats.files += 1
            stats.uncompressed_bytes += asset.uncompressed_size
            stats.compressed_bytes += compressed
        else:
            raise EmitError(f"Unknown asset type for {item.path}: {type(asset).__name__}")

    out.write("    }\n")

    for item in toc:
        if isinstance(item.asset, DirAsset):
            _write_dir_entries(out, item.path, item.asset, index)

    out.write("\n    return AssetsFS(_assets)\n\n\n")

    if config.variable_comment:
        out.write(f"# {config.variable_comment}\n")
    out.write(f"{config.variable_name} = _build_assets()\n\n")

    exports = dict.fromkeys((config.variable_name,) + _RUNTIME_EXPORTS)
    out.write("__all__ = [\n")
    for name in exports:
        out.write(f"    {_quote(name)},\n")
    out.write("]\n")

    return stats


def _write_dir(out: TextIO, path: str, asset: DirAsset) -> None:
    out.write(f"{_RECORD_INDENT}{_quote(path)}: AssetDir(\n")
    out.write(f"{_FIELD_INDENT}name={_quote(asset.name)},\n")
    out.write(f"{_FIELD_INDENT}mod_time=parse_time({_quote(_marshal_time(path, asset.mod_time))}),\n")
    out.write(f"{_RECORD_INDENT}),\n")


def _write_file(out: TextIO, path: str, asset: FileAsset, source: SourceFS) -> int:
    mod_time = _marshal_time(path, asset.mod_time)

    out.write(f"{_RECORD_INDENT}{_quote(path)}: AssetFile(\n")
    out.write(f"{_FIELD_INDENT}name={_quote(asset.name)},\n")
    out.write(f"{_FIELD_INDENT}compressed_content=(\n")

    sink = EscapingWriter(out, indent=_CONTENT_INDENT)
    read = _compress_into(sink, path, source)
    if read != asset.uncompressed_size:
        raise EmitError(
            f"Source file {path} changed while generating: "
            f"expected {asset.uncompressed_size} bytes, read {read}"
        )
    sink.finish()

    out.write(f"\n{_FIELD_INDENT}),\n")
    out.write(f"{_FIELD_INDENT}size={asset.uncompressed_size},\n")
    out.write(f"{_FIELD_INDENT}mod_time=parse_time({_quote(mod_time)}),\n")
    out.write(f"{_RECORD_INDENT}),\n")

    return sink.bytes_written


def _compress_into(sink: EscapingWriter, path: str, source: SourceFS) -> int:
    try:
        with source.open(path) as f:
            counter = _CountingReader(f)
            # mtime=0 and no filename keep the gzip header identical across runs
            with gzip.GzipFile(filename="", mode="wb", fileobj=sink, mtime=0) as gz:
                shutil.copyfileobj(counter, gz)
    except OSError as exc:
        raise EmitError(f"Failed to read source file {path}: {exc}") from exc
    return counter.count


class _CountingReader:
    def __init__(self, wrapped):
        self.wrapped = wrapped
        self.count = 0

    def read(self, size: int = -1) -> bytes:
        data = self.wrapped.read(size)
        self.count += len(data)
        return data


def _write_dir_entries(out: TextIO, path: str, asset: DirAsset, index: dict) -> None:
    present = []
    for entry in asset.entries:
        if entry not in index:
            logger.warning("Dropping %s from %s: it was not walked", entry, path)
            continue
        present.append(entry)

    if not present:
        out.write(f"    _assets[{_quote(path)}].entries = ()\n")
        return

    out.write(f"    _assets[{_quote(path)}].entries = (\n")
    for entry in present:
        out.write(f"        _assets[{_quote(entry)}],\n")
    out.write("    )\n")


def _marshal_time(path: str, value: datetime) -> str:
    if value.tzinfo is None or value.utcoffset() is None:
        raise EmitError(f"Modification time of {path} has no timezone: {value}")
    return value.isoformat()


def _quote(value: str) -> str:
    # ascii() round-trips any str, lone surrogates from undecodable names included
    return ascii(value)
