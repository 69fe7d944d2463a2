"""
本文件用于从 Notion 拉取导航内容（链接、分类、网站配置），并归一化为领域模型。
主要类/对象:
- `NotionService`: 内容聚合服务（分页拉取、记录校验、映射、降级策略）
- `notion_service`: 全局服务单例
- `WEBSITE_CONFIG_DEFAULTS`: 网站配置缺省值
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

from app.core.config import get_settings
from app.core.exceptions import WebsiteConfigError
from app.core.logger import setup_logger
from app.schemas.notion import Category, Link, NavigationData, WebsiteConfig
from app.services.link_service import build_navigation, sort_links
from app.services.notion_client import NotionClient
from app.utils.cache import TimedCache
from app.utils.notion_records import (
    RecordCheck,
    check_category_page,
    check_config_page,
    check_link_page,
    database_icon_to_favicon,
    to_category,
    to_config_item,
    to_link,
)

settings = get_settings()
logger = setup_logger("NotionService")

T = TypeVar("T")

WEBSITE_CONFIG_DEFAULTS: Dict[str, str] = {
    "SITE_TITLE": "我的导航",
    "SITE_DESCRIPTION": "个人导航网站",
    "SITE_KEYWORDS": "导航,网址导航",
    "SITE_AUTHOR": "",
    "SITE_FOOTER": "",
    "THEME_NAME": "simple",
    "SHOW_THEME_SWITCHER": "true",
    "SOCIAL_GITHUB": "",
    "SOCIAL_BLOG": "",
    "SOCIAL_X": "",
    "SOCIAL_JIKE": "",
    "SOCIAL_WEIBO": "",
    "SOCIAL_XIAOHONGSHU": "",
    "CLARITY_ID": "",
    "GA_ID": "",
    "WIDGET_CONFIG": "",
}

LINK_SORTS = [
    {"property": "category1", "direction": "ascending"},
    {"property": "category2", "direction": "ascending"},
]
CATEGORY_FILTER = {"property": "Enabled", "checkbox": {"equals": True}}
CATEGORY_SORTS = [{"property": "Order", "direction": "ascending"}]


class NotionService:
    """
    输入:
    - `client`: Notion 客户端（默认按配置创建）
    - `links_db_id` / `categories_db_id` / `config_db_id`: 三个数据库 id

    输出:
    - 链接、分类、网站配置以及组装后的导航数据

    作用:
    - 链接与分类拉取失败时降级为空列表；网站配置拉取失败时向上抛出 `WebsiteConfigError`
    """

    def __init__(
        self,
        client: Optional[NotionClient] = None,
        links_db_id: Optional[str] = None,
        categories_db_id: Optional[str] = None,
        config_db_id: Optional[str] = None,
        revalidate_seconds: Optional[float] = None,
    ) -> None:
        self.client = client or NotionClient()
        self.links_db_id = links_db_id if links_db_id is not None else settings.NOTION_LINKS_DB_ID
        self.categories_db_id = categories_db_id if categories_db_id is not None else settings.NOTION_CATEGORIES_DB_ID
        self.config_db_id = config_db_id if config_db_id is not None else settings.NOTION_WEBSITE_CONFIG_ID
        ttl = revalidate_seconds if revalidate_seconds is not None else settings.REVALIDATE_TIME
        self.navigation_cache: TimedCache[NavigationData] = TimedCache(ttl)

    async def fetch_all_records(
        self,
        database_id: str,
        check: Callable[[Any], RecordCheck],
        transform: Callable[[Dict[str, Any]], T],
        sorts: Optional[List[Dict[str, Any]]] = None,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[T]:
        """
        输入:
        - `database_id`: 数据库 id
        - `check`: 记录校验函数（不通过的记录被静默丢弃）
        - `transform`: 记录映射函数
        - `sorts` / `filter`: 查询条件

        输出:
        - 全部分页结果按源顺序拼接后的领域对象列表

        作用:
        - 按 `has_more`/`next_cursor` 拉空所有分页后一次性返回；接口异常直接抛出
        """

        records: List[T] = []
        cursor: Optional[str] = None
        page_no = 0
        while True:
            page_no += 1
            response = await self.client.query_database(database_id, start_cursor=cursor, sorts=sorts, filter=filter)
            for raw in response.get("results") or []:
                result = check(raw)
                if not result.ok:
                    logger.debug(f"跳过无效记录 {raw.get('id') if isinstance(raw, dict) else raw}: {result.reason}")
                    continue
                records.append(transform(raw))

            if not response.get("has_more"):
                break
            cursor = response.get("next_cursor") or None
            if cursor is None:
                logger.warning(f"⚠️ 数据库 {database_id} 声明还有更多分页但未返回 next_cursor，停止拉取")
                break
        logger.debug(f"数据库 {database_id} 共 {page_no} 页，{len(records)} 条有效记录")
        return records

    async def get_links(self) -> List[Link]:
        if not self.links_db_id:
            logger.warning("⚠️ 未配置 NOTION_LINKS_DB_ID，链接列表为空")
            return []
        try:
            links = await self.fetch_all_records(self.links_db_id, check_link_page, to_link, sorts=LINK_SORTS)
        except Exception as e:
            logger.error(f"❌ 获取链接失败: {e}")
            return []
        return sort_links(links)

    async def get_categories(self) -> List[Category]:
        if not self.categories_db_id:
            return []
        try:
            categories = await self.fetch_all_records(
                self.categories_db_id,
                check_category_page,
                to_category,
                sorts=CATEGORY_SORTS,
                filter=CATEGORY_FILTER,
            )
        except Exception as e:
            logger.error(f"❌ 获取分类失败: {e}")
            return []
        return sorted(categories, key=lambda c: c.order)

    async def get_website_config(self) -> WebsiteConfig:
        """
        输入:
        - 无

        输出:
        - 合并默认值后的网站配置（key 均为大写）

        作用:
        - 读取配置数据库的键值行与数据库图标；任何失败都转换为 `WebsiteConfigError`
        """

        if not self.config_db_id:
            raise WebsiteConfigError("获取网站配置失败: 未配置 NOTION_WEBSITE_CONFIG_ID")
        try:
            items = await self.fetch_all_records(self.config_db_id, check_config_page, to_config_item)
            database = await self.client.retrieve_database(self.config_db_id)
        except Exception as e:
            logger.error(f"❌ 获取网站配置失败: {e}")
            raise WebsiteConfigError("获取网站配置失败") from e

        config_map: Dict[str, str] = {}
        for item in items:
            if item is None:
                continue
            key, value = item
            config_map[key] = value

        config: WebsiteConfig = dict(WEBSITE_CONFIG_DEFAULTS)
        config.update(config_map)
        config["SITE_FAVICON"] = database_icon_to_favicon(database)
        return config

    async def load_navigation(self) -> NavigationData:
        categories, links, config = await asyncio.gather(
            self.get_categories(),
            self.get_links(),
            self.get_website_config(),
        )
        navigation = build_navigation(categories, links, config)
        logger.info(f"✅ 导航数据已刷新: {len(navigation.categories)} 个分类, {len(navigation.links)} 条链接")
        return navigation

    async def get_navigation(self, force_refresh: bool = False) -> NavigationData:
        """在重验证周期内复用已组装的导航数据。"""

        return await self.navigation_cache.get_or_fetch(self.load_navigation, force_refresh=force_refresh)


notion_service = NotionService()
