"""
本文件用于封装小组件客户端对导航站服务端接口（以及少量公共接口）的调用。
主要类:
- `SiteApiClient`: 天气/空气质量/定位/热搜接口客户端
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin

import aiohttp
from pydantic import ValidationError

from app.core.config import get_settings
from app.core.exceptions import CityNotFoundError, HotNewsError, WeatherServiceError
from app.core.logger import setup_logger
from app.schemas.weather import UNKNOWN_LOCATION, GeoCoordinates, ResolvedLocation, WeatherData
from app.schemas.widgets import HotNewsItem

settings = get_settings()
logger = setup_logger("SiteApiClient")

AIR_QUALITY_FIELDS = {"aqi", "aqi_display", "aqi_level", "aqi_category", "aqi_color", "primary_pollutant"}


class SiteApiClient:
    """
    输入:
    - `base_url`: 导航站地址（默认读取 `SITE_BASE_URL`）

    输出:
    - 各接口解析后的数据

    作用:
    - `_get_json` 是唯一的网络出口，返回 `(状态码, JSON)`；上层方法负责状态与字段的语义判断
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.base_url = (base_url or settings.SITE_BASE_URL).rstrip("/") + "/"
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Tuple[int, Any]:
        url = path if path.startswith(("http://", "https://")) else urljoin(self.base_url, path.lstrip("/"))
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout, headers={"Accept": "application/json"}) as session:
            async with session.get(url, params=params) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = None
                return resp.status, data

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Tuple[int, Any]:
        return await self._get_json(path, params)

    async def fetch_weather(self, location: str) -> WeatherData:
        status, data = await self._get_json("/api/weather", {"city": location})
        if status == 404:
            raise CityNotFoundError(location)
        if not 200 <= status < 300:
            raise WeatherServiceError(f"天气数据获取失败 - HTTP状态码: {status}")
        if not isinstance(data, dict):
            raise WeatherServiceError("天气数据格式错误")
        if data.get("error"):
            raise WeatherServiceError(str(data["error"]))

        return WeatherData(
            location=data.get("location") or location,
            temperature=data.get("temp"),
            condition=data.get("text") or "",
            icon=str(data.get("icon") or ""),
            temp_min=data.get("tempMin"),
            temp_max=data.get("tempMax"),
        )

    async def fetch_air_quality(self, location: str, coords: Optional[GeoCoordinates] = None) -> Dict[str, Any]:
        """
        输入:
        - `location`: 地名
        - `coords`: 经纬度（存在时优先按坐标查询）

        输出:
        - 可合并进 `WeatherData` 的空气质量字段（别名形式）；任何失败都返回空字典
        """

        if coords and coords.latitude and coords.longitude:
            params: Dict[str, Any] = {"lat": coords.latitude, "lon": coords.longitude}
        else:
            params = {"location": location}

        try:
            status, data = await self._get_json("/api/weather/air", params)
        except Exception as e:
            logger.debug(f"空气质量获取失败 {location}: {e}")
            return {}
        if not 200 <= status < 300 or not isinstance(data, dict) or data.get("error"):
            return {}

        fields = {
            "aqi": data.get("aqi"),
            "aqiDisplay": data.get("aqiDisplay"),
            "aqiLevel": data.get("level"),
            "aqiCategory": data.get("category"),
            "aqiColor": data.get("color"),
            "primaryPollutant": data.get("primaryPollutant"),
        }
        try:
            partial = WeatherData.model_validate({"location": location, **fields})
        except ValidationError as e:
            logger.warning(f"⚠️ 空气质量数据格式异常，已忽略 {location}: {e}")
            return {}
        return partial.model_dump(by_alias=True, include=AIR_QUALITY_FIELDS)

    async def get_location_from_geo(self, coords: GeoCoordinates) -> Optional[str]:
        status, data = await self._get_json(
            "/api/weather/geo", {"lat": coords.latitude, "lon": coords.longitude}
        )
        if not 200 <= status < 300 or not isinstance(data, dict):
            return None
        location = data.get("location")
        if location and location != UNKNOWN_LOCATION:
            return location
        return None

    async def get_location_from_ip(self) -> Optional[ResolvedLocation]:
        status, data = await self._get_json("/api/weather/ip")
        if not 200 <= status < 300 or not isinstance(data, dict):
            return None
        location = data.get("location")
        if not location or location == UNKNOWN_LOCATION:
            return None
        result = ResolvedLocation(location=location)
        if data.get("latitude") and data.get("longitude"):
            result.coords = GeoCoordinates(latitude=data["latitude"], longitude=data["longitude"])
        return result

    async def fetch_hot_news(self) -> Dict[str, List[HotNewsItem]]:
        status, data = await self._get_json("/api/hot-news")
        if not 200 <= status < 300 or not isinstance(data, dict):
            raise HotNewsError("获取热搜数据失败")
        return {
            platform: [HotNewsItem.model_validate(item) for item in items if isinstance(item, dict)]
            for platform, items in data.items()
            if isinstance(items, list)
        }
