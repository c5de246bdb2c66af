from __future__ import annotations

import gzip
import io
import stat
import threading
from datetime import datetime, timezone

import pytest

from vfsembed.runtime import (
    AssetDir,
    AssetFile,
    AssetFileHandle,
    AssetsFS,
    AssetUsageError,
    CorruptAssetError,
    parse_time,
)

from conftest import FIXED_TIME


SCENARIO = {"/a.txt": b"hello", "/sub/b.txt": b"world"}


def _names(records):
    return [record.name for record in records]


def test_scenario_tree(build) -> None:
    assets = build(SCENARIO).assets

    with assets.open("/") as root:
        assert root.stat().is_dir()
        assert _names(root.readdir(0)) == ["a.txt", "sub"]

    with assets.open("/a.txt") as f:
        assert f.read() == b"hello"

    with assets.open("/sub") as sub:
        assert _names(sub.readdir(0)) == ["b.txt"]


def test_round_trip_preserves_every_byte(build) -> None:
    files = {
        "/empty": b"",
        "/binary.bin": bytes(range(256)) * 64,
        "/quotes.txt": b'say "hi" \\ back\nslash\r\n\t\x00',
        "/nested/deep/text.txt": "café ☃\n".encode("utf-8") * 1000,
    }
    assets = build(files).assets

    for path, data in files.items():
        with assets.open(path) as f:
            assert f.read() == data
            assert f.stat().size == len(data)


def test_read_in_chunks_and_readinto(build) -> None:
    data = bytes(range(256)) * 10
    assets = build({"/data.bin": data}).assets

    with assets.open("/data.bin") as f:
        chunks = []
        while True:
            chunk = f.read(100)
            if not chunk:
                break
            chunks.append(chunk)
    assert b"".join(chunks) == data

    buffer = bytearray(len(data))
    with assets.open("/data.bin") as f:
        assert f.readinto(buffer) == len(data)
    assert bytes(buffer) == data


def test_stat_metadata(build) -> None:
    assets = build(SCENARIO).assets

    info = assets.open("/a.txt").stat()
    assert info.name == "a.txt"
    assert info.size == 5
    assert not info.is_dir()
    assert stat.S_ISREG(info.mode)
    assert stat.S_IMODE(info.mode) == 0o444
    assert info.mod_time == FIXED_TIME

    info = assets.open("/sub").stat()
    assert info.name == "sub"
    assert info.size == 0
    assert info.is_dir()
    assert stat.S_ISDIR(info.mode)
    assert stat.S_IMODE(info.mode) == 0o755

    assert assets.open("/").stat().name == "/"


def test_empty_directory_lists_nothing(build) -> None:
    assets = build({"/a.txt": b"x"}, dirs=["/empty"]).assets

    with assets.open("/empty") as d:
        assert d.readdir(0) == []
    assert _names(assets.open("/").readdir(0)) == ["a.txt", "empty"]


def test_missing_path_is_not_found(build) -> None:
    assets = build(SCENARIO).assets

    with pytest.raises(FileNotFoundError):
        assets.open("/does/not/exist")
    with pytest.raises(FileNotFoundError):
        assets.stat("/nope")
    assert "/nope" not in assets
    assert "/a.txt" in assets


def test_seek_always_fails_on_files(build) -> None:
    module = build({"/a.txt": b"hello", "/empty.txt": b""})

    for path in ("/a.txt", "/empty.txt"):
        with module.assets.open(path) as f:
            assert not f.seekable()
            with pytest.raises(module.AssetUsageError):
                f.seek(0)
            with pytest.raises(module.AssetUsageError):
                f.seek(0, io.SEEK_END)


def test_readdir_rejects_nonzero_count(build) -> None:
    module = build(SCENARIO)

    root = module.assets.open("/")
    for count in (1, -1, 5):
        with pytest.raises(module.AssetUsageError):
            root.readdir(count)


def test_wrong_handle_kind_is_a_usage_error(build) -> None:
    module = build(SCENARIO)

    directory = module.assets.open("/sub")
    with pytest.raises(module.AssetUsageError):
        directory.read()
    with pytest.raises(module.AssetUsageError):
        directory.readinto(bytearray(4))
    with pytest.raises(module.AssetUsageError):
        directory.seek(0)

    with module.assets.open("/a.txt") as f:
        with pytest.raises(module.AssetUsageError):
            f.readdir(0)


def test_usage_errors_are_not_os_errors() -> None:
    assert not issubclass(AssetUsageError, OSError)
    assert not issubclass(CorruptAssetError, OSError)


def test_independent_handles(build) -> None:
    assets = build({"/a.txt": b"abcdef"}).assets

    first = assets.open("/a.txt")
    second = assets.open("/a.txt")
    assert first.read(3) == b"abc"
    assert second.read() == b"abcdef"
    assert first.read() == b"def"
    first.close()
    second.close()


def test_concurrent_reads(build) -> None:
    data = bytes(range(256)) * 512
    assets = build({"/big.bin": data}).assets
    results = []

    def reader() -> None:
        with assets.open("/big.bin") as f:
            results.append(f.read())

    threads = [threading.Thread(target=reader) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == [data] * 8


def test_read_after_close_fails(build) -> None:
    assets = build({"/a.txt": b"hello"}).assets

    f = assets.open("/a.txt")
    f.close()
    assert f.closed
    with pytest.raises(ValueError):
        f.read()


def test_gzip_bytes_decompress_to_content(build) -> None:
    assets = build({"/a.txt": b"hello"}).assets

    record = assets.stat("/a.txt")
    assert gzip.decompress(record.gzip_bytes()) == b"hello"


def test_mapping_is_read_only(build) -> None:
    assets = build(SCENARIO).assets

    assert sorted(assets) == ["/", "/a.txt", "/sub", "/sub/b.txt"]
    assert len(assets) == 4
    with pytest.raises(TypeError):
        assets._assets["/new"] = None


def test_corrupt_content_is_detected() -> None:
    when = datetime(2020, 1, 1, tzinfo=timezone.utc)
    bad_magic = AssetFile("bad", b"not gzip", 3, when)
    fs = AssetsFS({"/bad": bad_magic})

    with pytest.raises(CorruptAssetError):
        fs.open("/bad")

    truncated = AssetFile("cut", gzip.compress(b"hello world", mtime=0)[:-6], 11, when)
    handle = AssetFileHandle(truncated)
    with pytest.raises(CorruptAssetError):
        handle.read()
    handle.close()


def test_directory_records_from_runtime_module() -> None:
    when = parse_time("2020-01-01T00:00:00+00:00")
    child = AssetFile("c.txt", gzip.compress(b"c", mtime=0), 1, when)
    parent = AssetDir("/", when)
    parent.entries = (child,)
    fs = AssetsFS({"/": parent, "/c.txt": child})

    assert fs.open("/") is parent
    assert fs.open("/").readdir() == [child]
    assert when.tzinfo is not None


def test_astral_and_escaped_names_open(build) -> None:
    files = {
        "/\U0001F600.txt": b"smile",
        "/café.txt": b"ok",
        '/q"uote\\d.txt': b"escaped",
    }
    assets = build(files).assets

    for path, data in files.items():
        assert path in assets
        with assets.open(path) as f:
            assert f.read() == data
    assert _names(assets.open("/").readdir(0)) == sorted(
        ["\U0001F600.txt", "café.txt", 'q"uote\\d.txt']
    )
