# hexo_llm_translate/orchestrator.py
"""本模块包含翻译编排器：决定每篇文章是跳过、命中缓存还是调用模型翻译。"""

import asyncio
from collections.abc import Mapping
from typing import Optional

import structlog

from hexo_llm_translate.concurrency import ConcurrencyLimiter
from hexo_llm_translate.config import TranslateConfig
from hexo_llm_translate.exceptions import HexoTranslateError
from hexo_llm_translate.fingerprint import fingerprint
from hexo_llm_translate.manual import ManualTranslationLoader
from hexo_llm_translate.storage import CacheStore
from hexo_llm_translate.translator import LLMTranslator
from hexo_llm_translate.types import (
    CacheRecord,
    ContentItem,
    TitlePair,
    TranslationOutcome,
    TranslationState,
)
from hexo_llm_translate.wrapper import wrap_content

logger = structlog.get_logger(__name__)


class TranslationOrchestrator:
    """
    单篇文章的状态机：SKIPPED / MANUAL / CACHE_HIT 为直接结束的分支，
    其余文章经 PENDING -> TRANSLATING 走到 SUCCEEDED 或 FAILED。

    任何失败都只影响当前文章，返回未修改的原文。
    """

    def __init__(
        self,
        config: TranslateConfig,
        store: CacheStore,
        limiter: ConcurrencyLimiter,
        translator: LLMTranslator,
        manual: Optional[ManualTranslationLoader] = None,
    ):
        self.config = config
        self.store = store
        self.limiter = limiter
        self.translator = translator
        self.manual = manual
        self.title_pairs: list[TitlePair] = []
        self._load_task: Optional[asyncio.Task[Mapping[str, CacheRecord]]] = None
        self._credentials_warned = False

    async def ensure_loaded(self) -> Mapping[str, CacheRecord]:
        """单飞加载：并发调用者共享同一次 ``store.load()``。"""
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self.store.load())
        return await asyncio.shield(self._load_task)

    def _skip_reason(self, item: ContentItem) -> Optional[str]:
        if not item.body:
            return "no_body"
        if not self.config.enable:
            return "disabled"
        if item.layout != self.config.layout:
            return "layout_mismatch"
        if item.skip:
            return "opted_out"
        return None

    async def process(self, item: ContentItem) -> ContentItem:
        """流水线钩子入口：总是返回一篇文章，绝不向外抛出异常。"""
        outcome = await self.process_with_outcome(item)
        return outcome.item

    async def process_with_outcome(self, item: ContentItem) -> TranslationOutcome:
        try:
            return await self._process(item)
        except HexoTranslateError as e:
            return self._failed(item, e)
        except Exception as e:
            logger.error("翻译时发生未预期异常。", title=item.title, exc_info=True)
            return self._failed(item, e)

    async def _process(self, item: ContentItem) -> TranslationOutcome:
        reason = self._skip_reason(item)
        if reason is not None:
            logger.debug("跳过翻译。", title=item.title, reason=reason)
            return TranslationOutcome(item=item, state=TranslationState.SKIPPED)

        if self.manual is not None and self.manual.has_manual_translation(item.source):
            manual_outcome = self._apply_manual(item)
            if manual_outcome is not None:
                return manual_outcome

        if not self.config.has_credentials:
            if not self._credentials_warned:
                self._credentials_warned = True
                logger.warning("未设置 LLM_API_KEY，已跳过全部自动翻译。")
            return TranslationOutcome(item=item, state=TranslationState.SKIPPED)

        await self.ensure_loaded()

        digest = fingerprint(item.body, item.title)
        record = self.store.get(item.source)
        if record is not None and record.matches(digest, self.config.model):
            return await self._apply_cached(item, record)

        logger.debug("等待翻译槽位。", title=item.title, state=TranslationState.PENDING.value)
        return await self.limiter.run(lambda: self._translate(item, digest))

    def _apply_manual(self, item: ContentItem) -> Optional[TranslationOutcome]:
        assert self.manual is not None
        manual = self.manual.load_manual_translation(item.source)
        if manual is None:
            return None
        translated_title = manual.title or item.title
        wrapped = self._wrap(item, manual.body, translated_title)
        self.title_pairs.append(TitlePair(original=item.title, translated=translated_title))
        logger.info("使用手工翻译。", title=translated_title, source=item.source)
        return TranslationOutcome(
            item=item.model_copy(update={"title": translated_title, "body": wrapped}),
            state=TranslationState.MANUAL,
        )

    async def _apply_cached(
        self, item: ContentItem, record: CacheRecord
    ) -> TranslationOutcome:
        if record.original_title is None:
            # 旧版缓存没有原文标题，命中时补写一次
            record = record.model_copy(update={"original_title": item.title})
            await self.store.save(item.source, record)
        logger.info("命中缓存。", title=record.translated_title)
        return TranslationOutcome(
            item=item.model_copy(
                update={"title": record.translated_title, "body": record.wrapped_content}
            ),
            state=TranslationState.CACHE_HIT,
        )

    async def _translate(self, item: ContentItem, digest: str) -> TranslationOutcome:
        logger.debug("开始翻译。", title=item.title, state=TranslationState.TRANSLATING.value)
        draft = await self.translator.translate(item.title, item.body)

        wrapped = self._wrap(item, draft.body, draft.title)
        record = CacheRecord(
            hash=digest,
            model=self.config.model,
            original_title=item.title,
            translated_title=draft.title,
            wrapped_content=wrapped,
        )
        await self.store.save(item.source, record)
        self.title_pairs.append(TitlePair(original=item.title, translated=draft.title))

        logger.info("翻译成功。", title=draft.title, source=item.source)
        return TranslationOutcome(
            item=item.model_copy(update={"title": draft.title, "body": wrapped}),
            state=TranslationState.SUCCEEDED,
        )

    def _wrap(self, item: ContentItem, translated_body: str, translated_title: str) -> str:
        return wrap_content(
            item.body,
            translated_body,
            item.title,
            translated_title,
            source_lang=self.config.source_lang,
            target_lang=self.config.target_lang,
        )

    def _failed(self, item: ContentItem, error: Exception) -> TranslationOutcome:
        logger.error(f'跳过 "{item.title}"。', title=item.title, error=str(error))
        return TranslationOutcome(
            item=item, state=TranslationState.FAILED, error=str(error)
        )
