"""
本文件用于定义项目统一的业务异常体系，便于上层按降级策略统一处理。
主要类:
- `NotionNavError`: 业务异常基类
- `NotionAPIError` / `WebsiteConfigError`: 内容源相关异常
- `WeatherError` 及其子类: 天气数据相关异常
- `IPDiscoveryError` 及其子类: 本地/代理 IP 探测异常
- `IPLocationError` / `HotNewsError` / `LocationResolutionError`: 其他上游失败
"""

from typing import Optional


class NotionNavError(Exception):
    """
    输入:
    - 业务错误信息

    输出:
    - 异常对象

    作用:
    - 作为项目统一的业务异常基类，便于 API 层集中捕获与转换
    """

    pass


class NotionAPIError(NotionNavError):
    """Notion 接口返回非 2xx 或无法解析。"""

    def __init__(self, status: int, code: str = "", message: str = "") -> None:
        self.status = status
        self.code = code
        super().__init__(f"Notion API 错误 {status} {code}: {message}".strip())


class WebsiteConfigError(NotionNavError):
    """网站配置获取失败，页面无法渲染有效元信息。"""

    pass


class WeatherError(NotionNavError):
    pass


class CityNotFoundError(WeatherError):
    def __init__(self, city: str, message: Optional[str] = None) -> None:
        self.city = city
        super().__init__(message or f"找不到城市 {city} 的天气数据")


class WeatherServiceError(WeatherError):
    pass


class WeatherConfigError(WeatherError):
    pass


class IPDiscoveryError(NotionNavError):
    pass


class IPDiscoveryNotSupportedError(IPDiscoveryError):
    pass


class LocalIPTimeoutError(IPDiscoveryError):
    pass


class ProxyIPError(IPDiscoveryError):
    pass


class IPLocationError(NotionNavError):
    pass


class HotNewsError(NotionNavError):
    pass


class LocationResolutionError(NotionNavError):
    pass
