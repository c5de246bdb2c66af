from __future__ import annotations

import logging
from typing import List

from vfsembed.errors import WalkError
from vfsembed.source.base import EntryInfo, SourceFS, base_name, clean_path, join_path
from vfsembed.toc.model import DirAsset, FileAsset, PathAsset

logger = logging.getLogger(__name__)


def find_assets(source: SourceFS, root: str = "/") -> List[PathAsset]:
    """Walk ``source`` depth first and return its table of contents.

    Directories come before their children and children are visited in
    lexical order, so identical trees always produce identical tables.
    Entries that cannot be stat-ed are logged and skipped; a directory that
    cannot be listed aborts the walk with ``WalkError``.
    """

    root = clean_path(root)

    try:
        info = source.stat(root)
    except OSError as exc:
        raise WalkError(f"Cannot stat root {root}: {exc}") from exc

    toc: List[PathAsset] = []
    _walk(source, root, info, toc)

    logger.debug("Found %d entries under %s", len(toc), root)
    return toc


def _walk(source: SourceFS, path: str, info: EntryInfo, toc: List[PathAsset]) -> None:
    if not info.is_dir:
        toc.append(
            PathAsset(
                path=path,
                asset=FileAsset(
                    name=base_name(path),
                    uncompressed_size=info.size,
                    mod_time=info.mod_time,
                ),
            )
        )
        return

    entries = _read_dir_paths(source, path)
    toc.append(
        PathAsset(
            path=path,
            asset=DirAsset(
                name=base_name(path),
                mod_time=info.mod_time,
                entries=entries,
            ),
        )
    )

    for child in entries:
        try:
            child_info = source.stat(child)
        except OSError as exc:
            logger.warning("Can't stat %s: %s", child, exc)
            continue

        _walk(source, child, child_info, toc)


def _read_dir_paths(source: SourceFS, dirname: str) -> List[str]:
    try:
        children = source.list(dirname)
    except OSError as exc:
        raise WalkError(f"Cannot list directory {dirname}: {exc}") from exc

    names = sorted(child.name for child in children)
    return [join_path(dirname, name) for name in names]
