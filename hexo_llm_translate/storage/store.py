# hexo_llm_translate/storage/store.py
"""
双层缓存存储：本地 JSON 文件 + 可选的远程 PostgreSQL 表。

本地文件在构造时同步读取，注入层在首次异步加载之前就能看到历史标题；
远程层只在 ``load()`` 中同步，且任何远程故障都不会中断构建。
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Optional

import structlog

from hexo_llm_translate.config import TranslateConfig
from hexo_llm_translate.exceptions import StorageError
from hexo_llm_translate.storage.local import LocalCacheFile, parse_records
from hexo_llm_translate.storage.postgres import PostgresCacheTier
from hexo_llm_translate.types import CacheRecord

logger = structlog.get_logger(__name__)


class CacheStore:
    """进程级的 源路径 -> CacheRecord 映射。"""

    def __init__(self, cache_file: Path, remote: Optional[PostgresCacheTier] = None):
        self.local = LocalCacheFile(cache_file)
        self.remote = remote
        self._records: dict[str, CacheRecord] = self.local.read()
        self._closed = False
        if self._records:
            logger.debug("已读取本地缓存。", count=len(self._records), path=str(cache_file))

    @classmethod
    def from_config(cls, config: TranslateConfig) -> CacheStore:
        remote = None
        if config.remote_enabled and config.database_url is not None:
            remote = PostgresCacheTier(config.database_url, ssl=config.database_ssl)
        return cls(config.cache_file, remote=remote)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None

    def records(self) -> Mapping[str, CacheRecord]:
        """只读视图，供注入层读取全部缓存。"""
        return MappingProxyType(self._records)

    def get(self, key: str) -> Optional[CacheRecord]:
        return self._records.get(key)

    async def load(self) -> Mapping[str, CacheRecord]:
        """
        与远程层同步，远程条目在键冲突时覆盖本地条目。

        每个进程只应调用一次，由调用方负责单飞保护。
        """
        if self.remote is None or self._closed:
            return self.records()

        try:
            await self.remote.connect()
        except StorageError as e:
            logger.error("远程缓存不可用，本次构建仅使用本地缓存。", error=str(e))
            self.remote = None
            return self.records()

        try:
            raw = await self.remote.fetch_all()
        except StorageError as e:
            logger.error("同步远程缓存失败。", error=str(e))
            return self.records()

        self._records.update(parse_records(raw, origin="remote"))
        logger.info("已从远程缓存同步。", count=len(raw))
        return self.records()

    async def save(self, key: str, record: CacheRecord) -> None:
        """
        写入内存，再整体覆盖写本地文件，最后（若启用）写入远程表。

        内存映射在任何挂起点之前就已更新，因此并发保存时后写入的文件总是包含
        之前所有的保存。持久化失败只记录日志。
        """
        self._records[key] = record

        try:
            self.local.write(self._records)
        except StorageError as e:
            logger.error("本地缓存保存失败。", key=key, error=str(e))

        if self.remote is None or self._closed or not self.remote.connected:
            return
        try:
            await self.remote.upsert(key, record.to_json())
        except StorageError as e:
            if not self._closed:
                logger.error("远程缓存保存失败。", key=key, error=str(e))

    async def close(self) -> None:
        """标记为已关闭并释放远程连接池。之后的远程写入全部跳过。"""
        if self._closed:
            return
        self._closed = True
        if self.remote is not None:
            await self.remote.close()
