# hexo_llm_translate/storage/postgres.py
"""提供了基于 asyncpg 的远程缓存层，用于在多台构建机之间共享翻译结果。"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import asyncpg
import structlog

from hexo_llm_translate.exceptions import StorageError

logger = structlog.get_logger(__name__)

TABLE_NAME = "hexo_translate_cache"

CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    key TEXT PRIMARY KEY,
    value JSONB,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

SELECT_ALL_SQL = f"SELECT key, value::text AS value FROM {TABLE_NAME}"

UPSERT_SQL = f"""
INSERT INTO {TABLE_NAME} (key, value, updated_at)
VALUES ($1, $2::jsonb, CURRENT_TIMESTAMP)
ON CONFLICT (key) DO UPDATE SET value = $2::jsonb, updated_at = CURRENT_TIMESTAMP
"""

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresCacheTier:
    """远程缓存表 ``hexo_translate_cache`` 的读写封装。所有错误都转换为 StorageError。"""

    def __init__(self, dsn: str, ssl: Optional[str] = "require", max_size: int = 4):
        self.dsn = dsn
        self.ssl = ssl
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        if self._pool is not None:
            return
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn, ssl=self.ssl, min_size=1, max_size=self.max_size
            )
            await self._pool.execute(CREATE_TABLE_SQL)
        except _DB_ERRORS as e:
            await self.close()
            raise StorageError(f"连接远程缓存数据库失败: {e}") from e
        logger.info("PostgreSQL 远程缓存已启用。")

    async def fetch_all(self) -> dict[str, Any]:
        if self._pool is None:
            raise StorageError("远程缓存尚未连接。")
        try:
            rows = await self._pool.fetch(SELECT_ALL_SQL)
        except _DB_ERRORS as e:
            raise StorageError(f"读取远程缓存失败: {e}") from e
        return {row["key"]: row["value"] for row in rows}

    async def upsert(self, key: str, value: dict[str, Any]) -> None:
        if self._pool is None:
            raise StorageError("远程缓存尚未连接。")
        try:
            await self._pool.execute(UPSERT_SQL, key, json.dumps(value, ensure_ascii=False))
        except _DB_ERRORS as e:
            raise StorageError(f"写入远程缓存失败: {e}") from e

    async def close(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None:
            await pool.close()
            logger.debug("远程缓存连接池已关闭。")
