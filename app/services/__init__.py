"""
本包用于集中导出服务层单例，便于上层直接引用。
主要导出:
- `notion_service`
- `weather_service`
- `ip_location_service`
- `hot_news_service`
"""

from app.services.hot_news_service import hot_news_service
from app.services.ip_location_service import ip_location_service
from app.services.notion_service import notion_service
from app.services.weather_service import weather_service

__all__ = ["notion_service", "weather_service", "ip_location_service", "hot_news_service"]
