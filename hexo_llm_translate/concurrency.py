# hexo_llm_translate/concurrency.py
"""本模块提供一个先进先出的异步并发限制器，用于约束同时进行的翻译请求数。"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

DEFAULT_CONCURRENCY = 2


class ConcurrencyLimiter:
    """
    最多允许 ``limit`` 个操作同时执行，多余的调用者按到达顺序排队。

    槽位释放时若有等待者，槽位直接移交给队首等待者，而不是先归还再被抢占，
    因此后到的调用者不会插队。
    """

    def __init__(self, limit: int = DEFAULT_CONCURRENCY):
        if limit <= 0:
            raise ValueError("并发上限必须为正数")
        self.limit = limit
        self._active = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return len(self._waiters)

    async def _acquire(self) -> None:
        if self._active < self.limit and not self._waiters:
            self._active += 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # 槽位已经移交过来，取消时必须继续传给下一个
                self._release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._active -= 1

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """在获得槽位后执行 ``operation``，无论成功失败都会释放槽位。"""
        await self._acquire()
        try:
            return await operation()
        finally:
            self._release()


def create_concurrency_limiter(
    limit: int = DEFAULT_CONCURRENCY,
) -> Callable[[Callable[[], Awaitable[T]]], Awaitable[T]]:
    """返回限制器的准入函数 ``run``。"""
    return ConcurrencyLimiter(limit).run
