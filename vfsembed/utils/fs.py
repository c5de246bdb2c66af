import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO

from vfsembed.errors import FilesystemError


def ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to create directory: {path}"
        ) from exc


def remove_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to remove file: {path}"
        ) from exc

@contextmanager
def atomic_output(path: Path, *, encoding: str = "utf-8") -> Iterator[TextIO]:
    """Open a text stream whose contents replace ``path`` only on success.

    The data is written to a sibling ``.tmp`` file first. If the body raises,
    the temporary file is removed and ``path`` is left as it was.
    """

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    ensure_dir(path.parent)

    try:
        stream = tmp_path.open("w", encoding=encoding, newline="\n")
    except OSError as exc:
        raise FilesystemError(
            f"Failed to create output file: {tmp_path}"
        ) from exc

    try:
        with stream:
            yield stream
    except BaseException:
        remove_file(tmp_path)
        raise

    try:
        os.replace(tmp_path, path)
    except OSError as exc:
        remove_file(tmp_path)
        raise FilesystemError(
            f"Failed to move generated file into place: {path}"
        ) from exc
