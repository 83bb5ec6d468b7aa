# hexo_llm_translate/storage/local.py
"""本地 JSON 缓存文件：同步读写，是启动时唯一可靠的数据来源。"""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from hexo_llm_translate.exceptions import StorageError
from hexo_llm_translate.types import CacheRecord

logger = structlog.get_logger(__name__)


def parse_records(raw: Mapping[str, Any], origin: str) -> dict[str, CacheRecord]:
    """把原始的 键 -> JSON 对象 映射解析为 CacheRecord，跳过无法解析的条目。"""
    records: dict[str, CacheRecord] = {}
    for key, value in raw.items():
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                logger.warning("缓存条目不是合法的 JSON，已跳过。", key=key, origin=origin)
                continue
        try:
            records[key] = CacheRecord.model_validate(value)
        except ValidationError as e:
            logger.warning(
                "缓存条目格式无效，已跳过。", key=key, origin=origin, error=str(e)
            )
    return records


class LocalCacheFile:
    """以美化格式整体覆盖写入的 JSON 文件。"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> dict[str, CacheRecord]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("无法解析本地缓存文件，将使用空缓存。", path=str(self.path), error=str(e))
            return {}
        if not isinstance(raw, dict):
            logger.warning("本地缓存文件的顶层不是对象，将使用空缓存。", path=str(self.path))
            return {}
        return parse_records(raw, origin="local")

    def write(self, records: Mapping[str, CacheRecord]) -> None:
        """先写临时文件再原子替换，写入失败时原文件保持不变。"""
        data = {key: record.to_json() for key, record in records.items()}
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
            )
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"写入本地缓存文件 '{self.path}' 失败: {e}") from e
