"""
本文件用于按网站配置 `WIDGET_CONFIG` 组装首页小组件，并统一启动与停止。
主要函数/类:
- `parse_widget_config`: 解析逗号分隔的小组件名称
- `HomeWidgets`: 小组件容器
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.core.logger import setup_logger
from app.schemas.notion import WebsiteConfig
from app.widgets.api_client import SiteApiClient
from app.widgets.clock import SimpleClockWidget
from app.widgets.hot_news import HotNewsWidget
from app.widgets.ip_info import IPInfoWidget
from app.widgets.weather import WeatherWidget

logger = setup_logger("HomeWidgets")

WIDGET_FACTORIES: Dict[str, Callable[[SiteApiClient], Any]] = {
    "简易时钟": lambda api: SimpleClockWidget(),
    "圆形时钟": lambda api: SimpleClockWidget(),
    "天气": lambda api: WeatherWidget(api=api),
    "IP信息": lambda api: IPInfoWidget(api=api),
    "热搜": lambda api: HotNewsWidget(api=api),
}


def parse_widget_config(value: Optional[str]) -> List[str]:
    return [name.strip() for name in (value or "").split(",") if name.strip()]


class HomeWidgets:
    """
    输入:
    - `config`: 网站配置（读取 `WIDGET_CONFIG`）
    - `api`: 各小组件共享的接口客户端

    输出:
    - `widgets`: 按配置顺序排列的 `(名称, 小组件)` 列表

    作用:
    - 未知名称跳过；同名重复出现时各自创建独立实例
    """

    def __init__(self, config: WebsiteConfig, api: Optional[SiteApiClient] = None) -> None:
        self.api = api or SiteApiClient()
        self.widgets: List[Tuple[str, Any]] = []
        for name in parse_widget_config(config.get("WIDGET_CONFIG")):
            factory = WIDGET_FACTORIES.get(name)
            if factory is None:
                logger.warning(f"⚠️ 未知小组件: {name}")
                continue
            self.widgets.append((name, factory(self.api)))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.widgets]

    def get(self, name: str) -> Optional[Any]:
        for widget_name, widget in self.widgets:
            if widget_name == name:
                return widget
        return None

    async def start(self) -> None:
        await asyncio.gather(*(widget.start() for _, widget in self.widgets))

    async def stop(self) -> None:
        for _, widget in self.widgets:
            await widget.stop()
