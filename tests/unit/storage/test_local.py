# tests/unit/storage/test_local.py
"""针对本地 JSON 缓存文件的单元测试。"""

import json
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from hexo_llm_translate.exceptions import StorageError
from hexo_llm_translate.storage.local import LocalCacheFile
from hexo_llm_translate.types import CacheRecord


def _record(title: str = "Hello") -> CacheRecord:
    return CacheRecord(
        hash="h", model="m", original_title="你好", translated_title=title, wrapped_content="w"
    )


def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    assert LocalCacheFile(tmp_path / "absent.json").read() == {}


def test_write_creates_parent_and_pretty_prints_camel_case(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "cache.json"
    LocalCacheFile(path).write({"a.md": _record()})

    text = path.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    data = json.loads(text)
    assert data == {
        "a.md": {
            "hash": "h",
            "model": "m",
            "originalTitle": "你好",
            "translatedTitle": "Hello",
            "wrappedContent": "w",
        }
    }
    assert "你好" in text
    assert not path.with_name("cache.json.tmp").exists()


def test_round_trip(tmp_path: Path) -> None:
    cache_file = LocalCacheFile(tmp_path / "cache.json")
    cache_file.write({"a.md": _record("A"), "b.md": _record("B")})
    records = cache_file.read()
    assert set(records) == {"a.md", "b.md"}
    assert records["b.md"].translated_title == "B"


def test_corrupt_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    assert LocalCacheFile(path).read() == {}


def test_invalid_entries_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_text(
        json.dumps(
            {
                "good.md": {"hash": "h", "model": "m", "translatedTitle": "T", "wrappedContent": "W"},
                "bad.md": {"hash": "h"},
            }
        ),
        encoding="utf-8",
    )
    records = LocalCacheFile(path).read()
    assert list(records) == ["good.md"]
    assert records["good.md"].original_title is None


def test_failed_write_raises_storage_error_and_keeps_old_file(
    tmp_path: Path, mocker: MockerFixture
) -> None:
    path = tmp_path / "cache.json"
    cache_file = LocalCacheFile(path)
    cache_file.write({"a.md": _record("old")})

    mocker.patch("hexo_llm_translate.storage.local.os.replace", side_effect=OSError("disk full"))
    with pytest.raises(StorageError, match="disk full"):
        cache_file.write({"a.md": _record("new")})

    assert cache_file.read()["a.md"].translated_title == "old"
