"""
本文件用于对接和风天气（QWeather），为天气小组件提供城市天气、空气质量与逆地理编码数据。
主要类/对象:
- `WeatherService`: 和风天气接口封装
- `weather_service`: 全局服务单例
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import aiohttp

from app.core.config import get_settings
from app.core.exceptions import CityNotFoundError, WeatherConfigError, WeatherServiceError
from app.core.logger import setup_logger
from app.schemas.weather import UNKNOWN_LOCATION

settings = get_settings()
logger = setup_logger("WeatherService")


def _to_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number


class WeatherService:
    """
    输入:
    - `api_key` / `api_host` / `geo_host`: 和风天气凭据与域名（默认读取配置）

    输出:
    - 与前端约定的扁平 JSON 字段

    作用:
    - 城市名先经 GeoAPI 查询得到 location id 与经纬度，再查询实况/预报/空气质量
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_host: Optional[str] = None,
        geo_host: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.QWEATHER_API_KEY
        self.api_host = api_host or settings.QWEATHER_API_HOST
        self.geo_host = geo_host or settings.QWEATHER_GEO_HOST
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not (self.api_key or "").strip():
            raise WeatherConfigError("未配置 QWEATHER_API_KEY，天气服务不可用")

        query = dict(params or {})
        query["key"] = self.api_key
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=query) as resp:
                    if resp.status != 200:
                        raise WeatherServiceError(f"天气服务响应错误: HTTP {resp.status}")
                    data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise WeatherServiceError(f"天气服务请求失败: {e}") from e
        if not isinstance(data, dict):
            raise WeatherServiceError("天气服务返回格式错误")
        return data

    async def lookup_city(self, location: str) -> Optional[Dict[str, Any]]:
        """
        输入:
        - `location`: 城市名，或 `经度,纬度` 形式的坐标

        输出:
        - 第一条匹配的城市信息（含 id/name/lat/lon）；无匹配返回 None
        """

        data = await self._get_json(
            f"https://{self.geo_host}/v2/city/lookup",
            {"location": location, "number": 1},
        )
        code = str(data.get("code", ""))
        if code == "404":
            return None
        if code != "200":
            raise WeatherServiceError(f"城市查询失败: code={code}")
        locations = data.get("location") or []
        return locations[0] if locations else None

    async def get_weather(self, city: str) -> Dict[str, Any]:
        place = await self.lookup_city(city)
        if not place:
            raise CityNotFoundError(city)

        location_id = place.get("id")
        now_data = await self._get_json(f"https://{self.api_host}/v7/weather/now", {"location": location_id})
        if str(now_data.get("code")) != "200":
            raise WeatherServiceError(f"实况天气获取失败: code={now_data.get('code')}")
        daily_data = await self._get_json(f"https://{self.api_host}/v7/weather/3d", {"location": location_id})

        now = now_data.get("now") or {}
        today: Dict[str, Any] = {}
        if str(daily_data.get("code")) == "200" and daily_data.get("daily"):
            today = daily_data["daily"][0]

        return {
            "location": place.get("name") or city,
            "temp": _to_number(now.get("temp")),
            "text": now.get("text", ""),
            "icon": str(now.get("icon", "")),
            "tempMin": _to_number(today.get("tempMin")),
            "tempMax": _to_number(today.get("tempMax")),
        }

    async def get_air_quality(
        self,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        输入:
        - `lat`/`lon`: 经纬度（优先）
        - `location`: 城市名（无坐标时先查询城市坐标）

        输出:
        - 首个空气质量指数（aqi/aqiDisplay/level/category/color/primaryPollutant）
        """

        if lat is None or lon is None:
            if not location:
                raise WeatherServiceError("缺少 location 或 lat/lon 参数")
            place = await self.lookup_city(location)
            if not place:
                raise CityNotFoundError(location)
            lat, lon = float(place["lat"]), float(place["lon"])

        data = await self._get_json(f"https://{self.api_host}/airquality/v1/current/{lat:.2f}/{lon:.2f}")
        indexes = data.get("indexes") or []
        if not indexes:
            raise WeatherServiceError("暂无空气质量数据")
        index = indexes[0]
        return {
            "aqi": _to_number(index.get("aqi")),
            "aqiDisplay": index.get("aqiDisplay"),
            "level": index.get("level"),
            "category": index.get("category"),
            "color": index.get("color"),
            "primaryPollutant": index.get("primaryPollutant"),
        }

    async def reverse_geocode(self, lat: float, lon: float) -> str:
        place = await self.lookup_city(f"{lon:.2f},{lat:.2f}")
        if not place:
            return UNKNOWN_LOCATION
        return place.get("adm2") or place.get("name") or UNKNOWN_LOCATION


weather_service = WeatherService()
