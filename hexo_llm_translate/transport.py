# hexo_llm_translate/transport.py
"""提供带超时与指数退避重试的 HTTP 传输层，是插件唯一跨越进程边界的地方。"""

import asyncio
import random
from typing import Any, Optional

import httpx
import structlog

from hexo_llm_translate.exceptions import TransportError

logger = structlog.get_logger(__name__)

BACKOFF_STEP = 2.0
BACKOFF_JITTER = 1.0


def backoff_delay(attempt: int) -> float:
    """第 ``attempt`` 次（从 0 开始）失败后的等待秒数：(attempt+1)*2s 加上 [0, 1) 秒抖动。"""
    return (attempt + 1) * BACKOFF_STEP + random.random() * BACKOFF_JITTER


class RetryingTransport:
    """对 JSON POST 请求进行超时控制和重试的传输层。它不理解翻译语义。"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        # 超时由 asyncio.wait_for 按次控制，底层客户端不再另设超时
        self._client = client or httpx.AsyncClient(timeout=None)
        self._owns_client = client is None

    async def _attempt(
        self, url: str, payload: dict[str, Any], headers: dict[str, str]
    ) -> Any:
        response = await self._client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()

    async def request(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: Optional[dict[str, str]] = None,
        timeout: float = 120.0,
        max_retries: int = 2,
    ) -> Any:
        """
        发送请求并返回解析后的 JSON。

        最多尝试 ``max_retries + 1`` 次；超时、网络错误、非 2xx 状态与无法解析的
        响应体都被视为同一类可重试失败。全部失败后抛出 TransportError，
        其 ``__cause__`` 为最后一次尝试的异常。
        """
        last_error: Optional[BaseException] = None
        for attempt in range(max_retries + 1):
            try:
                return await asyncio.wait_for(
                    self._attempt(url, payload, headers or {}), timeout=timeout
                )
            except (asyncio.TimeoutError, httpx.HTTPError, ValueError) as e:
                last_error = e
                if attempt >= max_retries:
                    break
                delay = backoff_delay(attempt)
                logger.warning(
                    f"请求失败，将在 {delay:.2f}s 后重试。",
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    error=_describe(e),
                )
                await asyncio.sleep(delay)

        assert last_error is not None
        raise TransportError(
            f"请求在 {max_retries + 1} 次尝试后仍然失败: {_describe(last_error)}",
            attempts=max_retries + 1,
        ) from last_error

    async def close(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("HTTP 客户端已关闭。")


def _describe(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "请求超时"
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    return f"{error.__class__.__name__}: {error}"
