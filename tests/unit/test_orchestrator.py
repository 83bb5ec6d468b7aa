# tests/unit/test_orchestrator.py
"""
针对 `TranslationOrchestrator` 的单元测试。

后端由 RecordingBackend 模拟，缓存写入临时目录，不涉及远程数据库。
"""

import asyncio
from pathlib import Path
from typing import Any

import pytest
from pytest_mock import MockerFixture

from hexo_llm_translate.concurrency import ConcurrencyLimiter
from hexo_llm_translate.config import TranslateConfig
from hexo_llm_translate.fingerprint import fingerprint
from hexo_llm_translate.manual import ManualTranslationLoader
from hexo_llm_translate.orchestrator import TranslationOrchestrator
from hexo_llm_translate.storage import CacheStore, LocalCacheFile
from hexo_llm_translate.transport import RetryingTransport
from hexo_llm_translate.translator import LLMTranslator
from hexo_llm_translate.types import CacheRecord, ContentItem, TranslationState
from tests.helpers.factories import (
    TEST_MODEL,
    RecordingBackend,
    backend_returning,
    completion,
    create_config,
    create_item,
    delimited,
)

GOOD_RESPONSE = delimited("Hello World", "Body [CODE_BLOCK_0] end")


def build(
    config: TranslateConfig, backend: RecordingBackend, **kwargs: Any
) -> TranslationOrchestrator:
    return TranslationOrchestrator(
        config,
        CacheStore(config.cache_file),
        ConcurrencyLimiter(config.max_concurrency),
        LLMTranslator(config, RetryingTransport(backend.client())),
        manual=ManualTranslationLoader(config.source_dir, config.target_lang),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_successful_translation_wraps_and_caches(config: TranslateConfig) -> None:
    backend = backend_returning(GOOD_RESPONSE)
    orchestrator = build(config, backend)
    item = create_item()

    outcome = await orchestrator.process_with_outcome(item)

    assert outcome.state is TranslationState.SUCCEEDED
    assert outcome.item.title == "Hello World"
    assert '<div class="hexo-llm-zh">\n\n正文 ```code``` 结束\n\n</div>' in outcome.item.body
    assert '<div class="hexo-llm-en">\n\nBody ```code``` end\n\n</div>' in outcome.item.body
    assert backend.calls == 1

    saved = LocalCacheFile(config.cache_file).read()["_posts/a.md"]
    assert saved.hash == fingerprint(item.body, item.title)
    assert saved.model == TEST_MODEL
    assert saved.original_title == "你好世界"
    assert saved.translated_title == "Hello World"
    assert saved.wrapped_content == outcome.item.body
    assert [(p.original, p.translated) for p in orchestrator.title_pairs] == [
        ("你好世界", "Hello World")
    ]


@pytest.mark.asyncio
async def test_request_carries_model_prompt_and_credentials(config: TranslateConfig) -> None:
    backend = backend_returning(GOOD_RESPONSE)
    await build(config, backend).process(create_item())

    request = backend.requests[0]
    assert request.headers["Authorization"] == "Bearer test-key"
    payload = backend.payload()
    assert payload["model"] == TEST_MODEL
    assert payload["messages"][1]["content"] == "Title: 你好世界\n\nContent: 正文 [CODE_BLOCK_0] 结束"


@pytest.mark.asyncio
async def test_second_run_hits_cache_without_backend_call(config: TranslateConfig) -> None:
    first = backend_returning(GOOD_RESPONSE)
    translated = await build(config, first).process(create_item())

    second = backend_returning(GOOD_RESPONSE)
    orchestrator = build(config, second)
    outcome = await orchestrator.process_with_outcome(create_item())

    assert outcome.state is TranslationState.CACHE_HIT
    assert outcome.item == translated
    assert second.calls == 0


@pytest.mark.asyncio
async def test_changed_model_or_content_retranslates(tmp_path: Path) -> None:
    config = create_config(tmp_path)
    await build(config, backend_returning(GOOD_RESPONSE)).process(create_item())

    other_model = create_config(tmp_path, model="other-model")
    backend = backend_returning(GOOD_RESPONSE)
    await build(other_model, backend).process(create_item())
    assert backend.calls == 1

    backend = backend_returning(GOOD_RESPONSE)
    await build(other_model, backend).process(create_item(title="新标题"))
    assert backend.calls == 1


@pytest.mark.asyncio
async def test_cache_hit_backfills_missing_original_title(config: TranslateConfig) -> None:
    item = create_item()
    LocalCacheFile(config.cache_file).write(
        {
            item.source: CacheRecord(
                hash=fingerprint(item.body, item.title),
                model=TEST_MODEL,
                translated_title="Cached",
                wrapped_content="cached body",
            )
        }
    )
    backend = backend_returning(GOOD_RESPONSE)

    outcome = await build(config, backend).process_with_outcome(item)

    assert outcome.state is TranslationState.CACHE_HIT
    assert outcome.item.title == "Cached"
    assert outcome.item.body == "cached body"
    assert backend.calls == 0
    assert LocalCacheFile(config.cache_file).read()[item.source].original_title == "你好世界"


@pytest.mark.parametrize(
    "item, overrides",
    [
        (create_item(body=""), {}),
        (create_item(), {"enable": False}),
        (create_item(layout="page"), {}),
        (create_item(skip=True), {}),
    ],
    ids=["no_body", "disabled", "layout_mismatch", "opted_out"],
)
@pytest.mark.asyncio
async def test_skipped_items_are_returned_unchanged(
    tmp_path: Path, item: ContentItem, overrides: dict[str, Any]
) -> None:
    config = create_config(tmp_path, **overrides)
    backend = backend_returning(GOOD_RESPONSE)

    outcome = await build(config, backend).process_with_outcome(item)

    assert outcome.state is TranslationState.SKIPPED
    assert outcome.item is item
    assert backend.calls == 0


@pytest.mark.asyncio
async def test_missing_credentials_skip_with_single_warning(
    tmp_path: Path, mocker: MockerFixture
) -> None:
    config = create_config(tmp_path, api_key=None)
    backend = backend_returning(GOOD_RESPONSE)
    orchestrator = build(config, backend)
    warning = mocker.patch("hexo_llm_translate.orchestrator.logger.warning")

    first = await orchestrator.process_with_outcome(create_item())
    second = await orchestrator.process_with_outcome(create_item(source="_posts/b.md"))

    assert first.state is second.state is TranslationState.SKIPPED
    assert backend.calls == 0
    warning.assert_called_once()


@pytest.mark.parametrize(
    "response",
    [
        (500, {"error": "boom"}),
        (200, completion("[TITLE_START]Hello[TITLE_END] no content markers")),
        (200, completion(delimited("Hello", "{% note info %} unclosed"))),
        (200, completion(delimited("Hello", '<span class=xxx">text</span>'))),
        (200, {"unexpected": "shape"}),
    ],
    ids=["http_error", "missing_content", "tag_mismatch", "malformed_html", "bad_shape"],
)
@pytest.mark.asyncio
async def test_failures_return_original_and_do_not_cache(
    config: TranslateConfig, response: tuple[int, Any]
) -> None:
    backend = RecordingBackend(response)
    orchestrator = build(config, backend)
    item = create_item()

    outcome = await orchestrator.process_with_outcome(item)

    assert outcome.state is TranslationState.FAILED
    assert outcome.error
    assert outcome.item is item
    assert orchestrator.store.get(item.source) is None
    assert not config.cache_file.exists()
    assert orchestrator.title_pairs == []


@pytest.mark.asyncio
async def test_process_never_raises(config: TranslateConfig) -> None:
    item = create_item()
    result = await build(config, RecordingBackend((500, {}))).process(item)
    assert result is item


@pytest.mark.asyncio
async def test_missing_title_markers_keep_original_title(config: TranslateConfig) -> None:
    backend = backend_returning("[CONTENT_START]Only body[CONTENT_END]")
    outcome = await build(config, backend).process_with_outcome(create_item(body="正文"))
    assert outcome.state is TranslationState.SUCCEEDED
    assert outcome.item.title == "你好世界"


@pytest.mark.asyncio
async def test_unknown_template_openers_are_escaped(config: TranslateConfig) -> None:
    backend = backend_returning(delimited("T", "{% -> arrow"))
    outcome = await build(config, backend).process_with_outcome(create_item(body="正文"))
    assert "&#123;% -> arrow" in outcome.item.body


@pytest.mark.asyncio
async def test_manual_translation_is_used_without_backend(config: TranslateConfig) -> None:
    manual_file = config.source_dir / "_posts" / "a.en.md"
    manual_file.parent.mkdir(parents=True)
    manual_file.write_text("---\ntitle: Hand Made\n---\nManual body", encoding="utf-8")
    backend = backend_returning(GOOD_RESPONSE)
    orchestrator = build(config, backend)

    outcome = await orchestrator.process_with_outcome(create_item())

    assert outcome.state is TranslationState.MANUAL
    assert outcome.item.title == "Hand Made"
    assert '<div class="hexo-llm-en">\n\nManual body\n\n</div>' in outcome.item.body
    assert backend.calls == 0
    assert orchestrator.store.get("_posts/a.md") is None


@pytest.mark.asyncio
async def test_manual_translation_works_without_credentials(tmp_path: Path) -> None:
    config = create_config(tmp_path, api_key=None)
    manual_file = config.source_dir / "_posts" / "a.en.md"
    manual_file.parent.mkdir(parents=True)
    manual_file.write_text("Manual body", encoding="utf-8")

    outcome = await build(config, backend_returning(GOOD_RESPONSE)).process_with_outcome(
        create_item()
    )

    assert outcome.state is TranslationState.MANUAL
    assert outcome.item.title == "你好世界"


@pytest.mark.asyncio
async def test_cache_is_loaded_once_for_concurrent_items(
    config: TranslateConfig, mocker: MockerFixture
) -> None:
    backend = backend_returning(GOOD_RESPONSE)
    orchestrator = build(config, backend)
    load = mocker.spy(orchestrator.store, "load")

    items = [create_item(source=f"_posts/{i}.md") for i in range(5)]
    outcomes = await asyncio.gather(*(orchestrator.process_with_outcome(i) for i in items))

    assert load.call_count == 1
    assert [o.state for o in outcomes] == [TranslationState.SUCCEEDED] * 5
    assert set(orchestrator.store.records()) == {item.source for item in items}
    assert set(LocalCacheFile(config.cache_file).read()) == {item.source for item in items}


@pytest.mark.asyncio
async def test_in_flight_translations_respect_concurrency_limit(
    tmp_path: Path, mocker: MockerFixture
) -> None:
    config = create_config(tmp_path, max_concurrency=2)
    orchestrator = build(config, backend_returning(GOOD_RESPONSE))
    active = peak = 0
    original = orchestrator.translator.translate

    async def tracking(title: str, body: str) -> Any:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        try:
            return await original(title, body)
        finally:
            active -= 1

    mocker.patch.object(orchestrator.translator, "translate", side_effect=tracking)

    await asyncio.gather(
        *(orchestrator.process(create_item(source=f"_posts/{i}.md")) for i in range(6))
    )

    assert peak == 2
