"""
本文件用于聚合各平台热搜榜单，一次请求返回全部平台的数据。
主要类/对象:
- `HotNewsService`: 并发抓取各平台热榜并统一字段
- `hot_news_service`: 全局服务单例
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from app.core.config import get_settings
from app.core.exceptions import HotNewsError
from app.core.logger import setup_logger
from app.schemas.widgets import HotNewsItem
from app.utils.cache import TimedCache

settings = get_settings()
logger = setup_logger("HotNewsService")

HotNewsMapping = Dict[str, List[HotNewsItem]]


def format_views(value: Any) -> str:
    """热度数值格式化：万以上保留一位小数。"""

    if value is None or value == "":
        return ""
    if isinstance(value, str) and not value.replace(".", "", 1).isdigit():
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number >= 10000:
        return f"{number / 10000:.1f}万"
    return str(int(number))


class HotNewsService:
    """
    输入:
    - `api_base`: 热榜聚合接口根地址（每个平台一个路径）
    - `platforms`: 平台 key 列表
    - `limit`: 每个平台保留条数

    输出:
    - `{platform: [HotNewsItem, ...]}`

    作用:
    - 单个平台失败时该平台为空列表；全部失败时抛出 `HotNewsError`
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        platforms: Optional[List[str]] = None,
        limit: Optional[int] = None,
        cache_seconds: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_base = (api_base or settings.HOT_NEWS_API_BASE).rstrip("/")
        self.platforms = platforms or list(settings.HOT_NEWS_PLATFORMS)
        self.limit = limit or settings.HOT_NEWS_LIMIT
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        ttl = cache_seconds if cache_seconds is not None else settings.HOT_NEWS_SERVER_CACHE_SECONDS
        self.cache: TimedCache[HotNewsMapping] = TimedCache(ttl)

    def parse_items(self, platform: str, data: Any) -> List[HotNewsItem]:
        raw_items: List[Any] = []
        if isinstance(data, list):
            raw_items = data
        elif isinstance(data, dict):
            raw_items = data.get("data") or data.get("items") or []

        items: List[HotNewsItem] = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                continue
            title = (raw.get("title") or "").strip()
            if not title:
                continue
            items.append(
                HotNewsItem(
                    title=title,
                    url=raw.get("url") or raw.get("mobileUrl") or raw.get("link") or "",
                    views=format_views(raw.get("hot", raw.get("views"))),
                    platform=platform,
                )
            )
            if len(items) >= self.limit:
                break
        return items

    async def fetch_platform(self, session: aiohttp.ClientSession, platform: str) -> List[HotNewsItem]:
        url = f"{self.api_base}/{platform}"
        async with session.get(url) as resp:
            if resp.status != 200:
                raise HotNewsError(f"{platform} 热榜获取失败: HTTP {resp.status}")
            data = await resp.json(content_type=None)
        return self.parse_items(platform, data)

    async def fetch_all(self) -> HotNewsMapping:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            results = await asyncio.gather(
                *(self.fetch_platform(session, p) for p in self.platforms),
                return_exceptions=True,
            )

        mapping: HotNewsMapping = {}
        errors: List[str] = []
        for platform, result in zip(self.platforms, results):
            if isinstance(result, BaseException):
                logger.warning(f"⚠️ 热榜抓取失败 {platform}: {result}")
                errors.append(f"{platform}: {result}")
                mapping[platform] = []
            else:
                mapping[platform] = result

        if errors and len(errors) == len(self.platforms):
            raise HotNewsError("获取热搜数据失败: " + "; ".join(errors))
        logger.info(f"🔥 热榜已刷新: {sum(len(v) for v in mapping.values())} 条")
        return mapping

    async def get_hot_news(self, force_refresh: bool = False) -> HotNewsMapping:
        return await self.cache.get_or_fetch(self.fetch_all, force_refresh=force_refresh)


hot_news_service = HotNewsService()
