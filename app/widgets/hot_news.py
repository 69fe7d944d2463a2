"""
本文件用于实现热搜小组件：整表缓存 15 分钟，按平台轮播展示，并定时强制刷新。
主要类:
- `HotNewsWidget`: 缓存闸门、平台轮播与刷新定时器
"""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional, Tuple

from app.core.logger import setup_logger
from app.schemas.widgets import HotNewsItem
from app.utils.cache import TimedCache
from app.utils.scheduler import PeriodicTask
from app.widgets.api_client import SiteApiClient

logger = setup_logger("HotNewsWidget")

HotNewsMapping = Dict[str, List[HotNewsItem]]

PLATFORMS: List[Tuple[str, str]] = [
    ("weibo", "微博"),
    ("baidu", "百度"),
    ("bilibili", "哔哩哔哩"),
    ("toutiao", "今日头条"),
    ("douyin", "抖音"),
]
CACHE_TTL = 15 * 60
ROTATE_INTERVAL = 30
REFRESH_INTERVAL = 15 * 60
FETCH_ERROR_TEXT = "获取热搜数据失败，请稍后重试"


class HotNewsWidget:
    """
    输入:
    - `api`: 接口客户端
    - `ttl`: 整表缓存有效期（秒）
    - `clock`: 缓存时钟（测试可注入）

    输出:
    - `active_platform` / `news` / `loading` / `error` 状态

    作用:
    - 有效期内的 `fetch()` 不发起请求，只按当前平台切换展示数据
    """

    def __init__(
        self,
        api: Optional[SiteApiClient] = None,
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
        rotate_interval: float = ROTATE_INTERVAL,
        refresh_interval: float = REFRESH_INTERVAL,
    ) -> None:
        self.api = api or SiteApiClient()
        self.cache: TimedCache[HotNewsMapping] = TimedCache(ttl, clock)
        self.platform_ids = [pid for pid, _ in PLATFORMS]
        self.active_platform = self.platform_ids[0]
        self.news: List[HotNewsItem] = []
        self.loading = True
        self.error: Optional[str] = None

        self._rotate_timer = PeriodicTask(rotate_interval, self.rotate, name="hot-news-rotate")
        self._refresh_timer = PeriodicTask(refresh_interval, self._forced_refresh, name="hot-news-refresh")

    def _show_active(self) -> None:
        mapping = self.cache.value
        if mapping and self.active_platform in mapping:
            self.news = mapping[self.active_platform]

    async def fetch(self, force_refresh: bool = False) -> Optional[HotNewsMapping]:
        # 空榜单不算有效缓存
        force_refresh = force_refresh or not self.cache.value
        if not force_refresh and self.cache.is_fresh():
            self._show_active()
            return self.cache.value

        self.loading = True
        self.error = None
        try:
            mapping = await self.cache.get_or_fetch(self.api.fetch_hot_news, force_refresh=force_refresh)
        except Exception as e:
            logger.error(f"❌ 获取热搜数据失败: {e}")
            self.error = FETCH_ERROR_TEXT
            return None
        finally:
            self.loading = False
        self.news = mapping.get(self.active_platform, [])
        return mapping

    async def _forced_refresh(self) -> None:
        await self.fetch(force_refresh=True)

    async def rotate(self) -> None:
        index = self.platform_ids.index(self.active_platform)
        self.active_platform = self.platform_ids[(index + 1) % len(self.platform_ids)]
        self._show_active()

    async def select_platform(self, platform: str) -> None:
        if platform not in self.platform_ids:
            raise ValueError(f"未知平台: {platform}")
        self.active_platform = platform
        self._show_active()
        if self._rotate_timer.running:
            await self._rotate_timer.restart()

    async def start(self) -> None:
        await self.fetch()
        self._rotate_timer.start()
        self._refresh_timer.start()

    async def stop(self) -> None:
        await self._rotate_timer.cancel()
        await self._refresh_timer.cancel()
