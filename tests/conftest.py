from __future__ import annotations

import importlib.util
import itertools
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from vfsembed.config import GenerateConfig
from vfsembed.generate import generate
from vfsembed.source.memory import MemorySource

FIXED_TIME = datetime(2021, 6, 1, 12, 30, tzinfo=timezone.utc)

_module_ids = itertools.count()


def load_generated(path: Path):
    spec = importlib.util.spec_from_file_location(f"generated_assets_{next(_module_ids)}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"hello")
    (root / "sub" / "b.txt").write_bytes(b"world")
    timestamp = FIXED_TIME.timestamp()
    for path in (root / "sub" / "b.txt", root / "a.txt", root / "sub", root):
        os.utime(path, (timestamp, timestamp))
    return root


@pytest.fixture
def build(tmp_path: Path):
    """Generate a module from a ``{path: bytes}`` tree and import it."""

    def _build(files, *, dirs=(), name="assets_vfsdata", **options):
        source = MemorySource(files, dirs=dirs, mod_time=FIXED_TIME)
        config = GenerateConfig(input=tmp_path, output=tmp_path / f"{name}.py", **options)
        generate(config, source=source)
        return load_generated(config.output)

    return _build
