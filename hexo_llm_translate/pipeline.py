# hexo_llm_translate/pipeline.py
"""把缓存、限流器、传输层与编排器组装在一起，并负责它们的获取与释放。"""

import asyncio
from collections.abc import Iterable
from types import TracebackType
from typing import Optional

import httpx
import structlog

from hexo_llm_translate.concurrency import ConcurrencyLimiter
from hexo_llm_translate.config import TranslateConfig
from hexo_llm_translate.injector import build_injections
from hexo_llm_translate.manual import ManualTranslationLoader
from hexo_llm_translate.orchestrator import TranslationOrchestrator
from hexo_llm_translate.storage import CacheStore
from hexo_llm_translate.transport import RetryingTransport
from hexo_llm_translate.translator import LLMTranslator
from hexo_llm_translate.types import ContentItem, TranslationOutcome

logger = structlog.get_logger(__name__)


class TranslationPipeline:
    """
    构建期间使用的顶层驱动::

        async with TranslationPipeline(config) as pipeline:
            outcomes = await pipeline.process_all(items)
            snippets = pipeline.injections()

    进入时获取资源，退出时关闭远程连接池和 HTTP 客户端，各只关闭一次。
    """

    def __init__(
        self,
        config: TranslateConfig,
        store: Optional[CacheStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.store = store or CacheStore.from_config(config)
        self.transport = RetryingTransport(http_client)
        self.limiter = ConcurrencyLimiter(config.max_concurrency)
        self.orchestrator = TranslationOrchestrator(
            config,
            self.store,
            self.limiter,
            LLMTranslator(config, self.transport),
            manual=ManualTranslationLoader(config.source_dir, config.target_lang),
        )
        self._closed = False

    async def __aenter__(self) -> "TranslationPipeline":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def process(self, item: ContentItem) -> ContentItem:
        return await self.orchestrator.process(item)

    async def process_all(self, items: Iterable[ContentItem]) -> list[TranslationOutcome]:
        """按给定顺序调度全部文章并发处理，结果顺序与输入一致。"""
        tasks = [self.orchestrator.process_with_outcome(item) for item in items]
        return list(await asyncio.gather(*tasks))

    def injections(self) -> dict[str, str]:
        return build_injections(
            self.orchestrator.title_pairs,
            self.store.records(),
            source_lang=self.config.source_lang,
            target_lang=self.config.target_lang,
        )

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self.store.close()
        finally:
            await self.transport.close()
        logger.debug("翻译流水线资源已释放。")
