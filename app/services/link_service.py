"""
本文件用于处理归一化后的链接集合：排序、分类统计与首页导航数据组装。
主要函数:
- `sort_links`: 置顶标签优先，其次按创建时间倒序
- `organize_categories`: 统计各主分类/子分类下的链接数量
- `build_navigation`: 过滤启用分类的链接，剔除无链接分类并派生子分类
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List

from app.schemas.notion import Category, CategoryStats, Link, NavigationData, SubCategory, WebsiteConfig
from app.utils.tools import slugify_sub_category


def _created_timestamp(link: Link) -> float:
    if not link.created:
        return 0.0
    try:
        created = datetime.fromisoformat(link.created.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


def sort_links(links: Iterable[Link]) -> List[Link]:
    """
    输入:
    - `links`: 链接集合

    输出:
    - 新的有序列表

    作用:
    - 含置顶标签的链接排在最前；同为置顶或同为非置顶时，按创建时间从新到旧
    """

    return sorted(links, key=lambda link: (not link.pinned, -_created_timestamp(link)))


def organize_categories(links: Iterable[Link]) -> Dict[str, CategoryStats]:
    stats: Dict[str, CategoryStats] = {}
    for link in links:
        entry = stats.setdefault(link.category1, CategoryStats(name=link.category1))
        entry.count += 1
        if link.category2:
            entry.sub_categories[link.category2] = entry.sub_categories.get(link.category2, 0) + 1
    return stats


def build_navigation(categories: List[Category], links: List[Link], config: WebsiteConfig) -> NavigationData:
    """
    输入:
    - `categories`: 已启用的分类（按 order 排序）
    - `links`: 已排序的链接
    - `config`: 合并默认值后的网站配置

    输出:
    - `NavigationData`

    作用:
    - 只保留主分类处于启用集合中的链接；只保留至少有一条链接的分类；
      子分类取自该分类下链接的 category2（按首次出现顺序去重）
    """

    enabled_names = [c.name for c in categories]
    enabled_set = set(enabled_names)
    visible_links = [link for link in links if link.category1 in enabled_set]

    subs_by_category: Dict[str, List[str]] = {}
    for link in visible_links:
        names = subs_by_category.setdefault(link.category1, [])
        if link.category2 not in names:
            names.append(link.category2)

    active: List[Category] = []
    for category in categories:
        sub_names = subs_by_category.get(category.name)
        if not sub_names:
            continue
        active.append(
            category.model_copy(
                update={
                    "sub_categories": [
                        SubCategory(id=slugify_sub_category(name), name=name) for name in sub_names
                    ]
                }
            )
        )

    return NavigationData(
        config=config,
        categories=active,
        links=visible_links,
        enabled_categories=enabled_names,
    )
