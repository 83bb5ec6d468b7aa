# hexo_llm_translate/translator.py
"""将一篇文章交给大模型翻译，并对返回结果做还原、校验和清理。"""

from typing import Any

import structlog

from hexo_llm_translate.config import TranslateConfig
from hexo_llm_translate.markup import (
    extract_code_blocks,
    restore_code_blocks,
    sanitize_template_tags,
    validate_translated_content,
)
from hexo_llm_translate.prompts import (
    build_chat_payload,
    extract_message_content,
    parse_delimited_response,
)
from hexo_llm_translate.transport import RetryingTransport
from hexo_llm_translate.types import TranslationDraft

logger = structlog.get_logger(__name__)


class LLMTranslator:
    """调用 OpenAI 兼容的 chat completions 端点完成单篇翻译。"""

    def __init__(self, config: TranslateConfig, transport: RetryingTransport):
        self.config = config
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        assert self.config.api_key is not None
        return {
            "Authorization": f"Bearer {self.config.api_key.get_secret_value()}",
            "Content-Type": "application/json",
        }

    async def _complete(self, payload: dict[str, Any]) -> str:
        response = await self.transport.request(
            self.config.endpoint,
            payload,
            headers=self._headers(),
            timeout=self.config.single_timeout,
            max_retries=self.config.max_retries,
        )
        return extract_message_content(response)

    async def translate(self, title: str, body: str) -> TranslationDraft:
        """
        翻译标题和正文。

        Raises:
            TransportError: 重试耗尽后仍无法完成请求。
            ResponseFormatError: 响应缺少分隔标记或正文为空。
            TranslationValidationError: 还原后的译文未通过结构校验。
        """
        masked_body, code_blocks = extract_code_blocks(body)
        payload = build_chat_payload(
            self.config.model, title, masked_body, self.config.target_lang
        )
        logger.debug(
            "发送翻译请求", title=title, code_blocks=len(code_blocks), model=self.config.model
        )

        raw = await self._complete(payload)
        translated_title, translated_body = parse_delimited_response(raw)

        translated_body = restore_code_blocks(translated_body, code_blocks)
        validate_translated_content(translated_body)
        translated_body = sanitize_template_tags(translated_body)

        return TranslationDraft(title=translated_title or title, body=translated_body)
