from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, TextIO

from vfsembed.config import GenerateConfig
from vfsembed.emit.writer import EmitStats, write_assets, write_header, write_runtime
from vfsembed.errors import EmitError, VfsembedError
from vfsembed.source.base import SourceFS
from vfsembed.source.local import LocalSource
from vfsembed.toc.model import PathAsset
from vfsembed.toc.walker import find_assets
from vfsembed.utils.fs import atomic_output

logger = logging.getLogger(__name__)


def generate(
    config: GenerateConfig,
    *,
    source: Optional[SourceFS] = None,
) -> Path:
    """Embed ``config.input`` (or ``source``) into the module at ``config.output``.

    The tree is walked completely before anything is written. The module is
    written next to its destination and moved into place only once it is
    complete, so a failed run never leaves a truncated module behind.
    """

    if source is None:
        source = LocalSource(config.input)

    logger.info("Walking %s", source)
    toc = find_assets(source)
    logger.info("Found %d entries", len(toc))

    with atomic_output(config.output) as out:
        stats = emit_module(out, config, toc, source)

    logger.info(
        "Wrote %s: %d directories, %d files, %d bytes compressed to %d",
        config.output,
        stats.directories,
        stats.files,
        stats.uncompressed_bytes,
        stats.compressed_bytes,
    )
    return config.output


def emit_module(
    out: TextIO,
    config: GenerateConfig,
    toc: List[PathAsset],
    source: SourceFS,
) -> EmitStats:
    try:
        write_header(out, config)
        write_runtime(out)
        return write_assets(out, config, toc, source)
    except VfsembedError:
        raise
    except OSError as exc:
        raise EmitError(f"Failed to write {config.output}: {exc}") from exc
