import importlib.util
import posixpath
from pathlib import Path
from types import ModuleType
from typing import Iterator, Tuple

from vfsembed.errors import ArtifactError


def load_module(path: Path) -> ModuleType:
    if not path.is_file():
        raise ArtifactError(f"Generated module not found: {path}")

    spec = importlib.util.spec_from_file_location(f"_vfsembed_artifact_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise ArtifactError(f"Cannot import generated module: {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ArtifactError(
            f"Failed to import generated module {path}: {exc}"
        ) from exc
    return module


def load_filesystem(path: Path, variable_name: str = "assets"):
    module = load_module(path)

    if not hasattr(module, variable_name):
        raise ArtifactError(
            f"Module '{path}' has no attribute '{variable_name}'"
        )

    fs = getattr(module, variable_name)
    if not callable(getattr(fs, "open", None)) or not callable(getattr(fs, "stat", None)):
        raise ArtifactError(
            f"Attribute '{variable_name}' is not an embedded assets filesystem"
        )
    return fs


def walk(fs, root: str = "/") -> Iterator[Tuple[str, object]]:
    """Yield ``(path, record)`` for ``root`` and everything below it, in order."""

    with fs.open(root) as handle:
        record = handle.stat()
        yield root, record
        if not record.is_dir():
            return
        children = handle.readdir(0)

    for child in children:
        yield from walk(fs, posixpath.join(root, child.name))
