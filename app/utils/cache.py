"""
本文件用于提供带 TTL 的单槽内存缓存，供热搜轮询、导航数据重验证等场景复用。
主要类:
- `TimedCache`: 记录最近一次获取时间与缓存值，在有效期内直接返回缓存

时钟与 TTL 均由构造函数注入，测试时可传入假时钟。
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class TimedCache(Generic[T]):
    """
    输入:
    - `ttl`: 有效期（秒）
    - `clock`: 返回当前时间（秒）的函数，默认 `time.monotonic`

    输出:
    - 缓存值或重新获取的值

    作用:
    - 有效期内且已有缓存时跳过网络请求；强制刷新或过期时整体替换缓存
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._value: Optional[T] = None
        self._fetched_at: Optional[float] = None

    @property
    def value(self) -> Optional[T]:
        return self._value

    @property
    def fetched_at(self) -> Optional[float]:
        return self._fetched_at

    def is_fresh(self) -> bool:
        if self._value is None or self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self.ttl

    def set(self, value: T) -> None:
        self._value = value
        self._fetched_at = self._clock()

    def clear(self) -> None:
        self._value = None
        self._fetched_at = None

    async def get_or_fetch(self, fetcher: Callable[[], Awaitable[T]], force_refresh: bool = False) -> T:
        """
        输入:
        - `fetcher`: 无参异步获取函数
        - `force_refresh`: 是否忽略有效期强制获取

        输出:
        - 缓存值或新获取的值

        作用:
        - 实现 TTL 闸门；获取失败时异常向上抛出，旧缓存保持不变
        """

        if not force_refresh and self.is_fresh():
            return self._value  # type: ignore[return-value]

        started_at = self._clock()
        value = await fetcher()
        self._value = value
        self._fetched_at = started_at
        return value
