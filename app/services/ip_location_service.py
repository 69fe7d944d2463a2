"""
本文件用于按 IP 查询地理位置：依次尝试多个公共定位服务，返回第一个成功结果。
主要类/对象:
- `IPProvider`: 单个定位服务（地址模板 + 字段转换）
- `IPLocationService`: 多服务冗余查询
- `ip_location_service`: 全局服务单例
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from app.core.config import get_settings
from app.core.exceptions import IPLocationError
from app.core.logger import setup_logger
from app.schemas.weather import UNKNOWN_LOCATION

settings = get_settings()
logger = setup_logger("IPLocationService")

UNKNOWN_COUNTRY = "未知国家"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class IPProvider:
    name: str
    url_template: str
    transform: Callable[[Dict[str, Any], str], Dict[str, Any]]
    check: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None

    def url(self, ip: str) -> str:
        return self.url_template.format(ip=quote(ip, safe=""))


def _from_ipapi_co(data: Dict[str, Any], ip: str) -> Dict[str, Any]:
    return {
        "ip": data.get("ip") or ip,
        "location": data.get("city") or UNKNOWN_LOCATION,
        "country": data.get("country_name") or UNKNOWN_COUNTRY,
        "latitude": data.get("latitude"),
        "longitude": data.get("longitude"),
    }


def _from_ip_api_com(data: Dict[str, Any], ip: str) -> Dict[str, Any]:
    return {
        "ip": data.get("query") or ip,
        "location": data.get("city") or UNKNOWN_LOCATION,
        "country": data.get("country") or UNKNOWN_COUNTRY,
        "latitude": data.get("lat"),
        "longitude": data.get("lon"),
    }


def _check_ip_api_com(data: Dict[str, Any]) -> Optional[str]:
    if data.get("status") == "fail":
        return f"返回错误: {data.get('message')}"
    return None


DEFAULT_PROVIDERS: List[IPProvider] = [
    IPProvider("ipapi.co", "https://ipapi.co/{ip}/json/", _from_ipapi_co),
    IPProvider(
        "ip-api.com",
        "http://ip-api.com/json/{ip}?fields=status,message,country,regionName,city,query,lat,lon&lang=zh-CN",
        _from_ip_api_com,
        _check_ip_api_com,
    ),
]


class IPLocationService:
    """
    输入:
    - `providers`: 按优先级排列的定位服务

    输出:
    - `{ip, location, country, latitude, longitude}`

    作用:
    - 单个服务失败时继续尝试下一个；全部失败时抛出携带最后一个错误信息的 `IPLocationError`
    """

    def __init__(self, providers: Optional[List[IPProvider]] = None, timeout: Optional[float] = None) -> None:
        self.providers = providers if providers is not None else DEFAULT_PROVIDERS
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    async def _fetch(self, provider: IPProvider, ip: str) -> Dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout, headers={"User-Agent": USER_AGENT}) as session:
            async with session.get(provider.url(ip)) as resp:
                if resp.status != 200:
                    reason = resp.reason or "未知错误"
                    raise IPLocationError(f"{provider.name} 服务响应错误: {resp.status} {reason}")
                data = await resp.json(content_type=None)
        if not isinstance(data, dict):
            raise IPLocationError(f"{provider.name} 返回格式错误")
        return data

    async def locate(self, ip: str) -> Dict[str, Any]:
        last_error: Optional[Exception] = None
        for provider in self.providers:
            try:
                data = await self._fetch(provider, ip)
                problem = provider.check(data) if provider.check else None
                if problem:
                    raise IPLocationError(f"{provider.name} {problem}")
                return provider.transform(data, ip)
            except Exception as e:
                logger.warning(f"⚠️ IP 定位服务 {provider.name} 失败: {e}")
                last_error = e

        message = str(last_error) if last_error else "所有服务均不可用"
        logger.error(f"❌ IP定位接口异常: {message}")
        raise IPLocationError(f"IP定位失败: {message}")


ip_location_service = IPLocationService()
