"""
本文件用于提供 FastAPI 依赖注入与模板引擎实例的集中出口。
主要对象:
- `settings`: 全局配置对象
- `templates`: Jinja2 模板渲染器
- `get_notion_service` / `get_weather_service` / `get_ip_location_service` / `get_hot_news_service`:
  服务依赖（测试中可通过 `app.dependency_overrides` 替换）
"""

from fastapi import Request
from fastapi.templating import Jinja2Templates

from app.core.config import BASE_DIR, get_settings
from app.services import hot_news_service, ip_location_service, notion_service, weather_service
from app.services.hot_news_service import HotNewsService
from app.services.ip_location_service import IPLocationService
from app.services.notion_service import NotionService
from app.services.weather_service import WeatherService

settings = get_settings()
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def get_notion_service() -> NotionService:
    return notion_service


def get_weather_service() -> WeatherService:
    return weather_service


def get_ip_location_service() -> IPLocationService:
    return ip_location_service


def get_hot_news_service() -> HotNewsService:
    return hot_news_service


def get_client_ip(request: Request) -> str:
    """
    输入:
    - `request`: FastAPI 请求对象

    输出:
    - 客户端 IP（优先 X-Forwarded-For 第一个地址，其次 X-Real-IP，最后为连接对端地址）
    """

    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "未知IP"


__all__ = [
    "settings",
    "templates",
    "get_notion_service",
    "get_weather_service",
    "get_ip_location_service",
    "get_hot_news_service",
    "get_client_ip",
]
