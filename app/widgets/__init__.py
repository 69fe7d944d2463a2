"""
本包用于实现首页小组件的客户端逻辑（定位、天气、IP 信息、热搜、时钟），通过导航站接口获取数据。
主要导出:
- `SiteApiClient`
- `WeatherWidget` / `IPInfoWidget` / `HotNewsWidget` / `SimpleClockWidget`
- `HomeWidgets`
"""

from app.widgets.api_client import SiteApiClient
from app.widgets.clock import SimpleClockWidget
from app.widgets.home import HomeWidgets
from app.widgets.hot_news import HotNewsWidget
from app.widgets.ip_info import IPInfoWidget
from app.widgets.weather import WeatherWidget

__all__ = [
    "SiteApiClient",
    "WeatherWidget",
    "IPInfoWidget",
    "HotNewsWidget",
    "SimpleClockWidget",
    "HomeWidgets",
]
