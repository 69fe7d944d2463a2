"""
本文件用于实现天气小组件：确定地点后并发获取天气与空气质量，合并为视图模型并定时刷新。
主要函数/类:
- `merge_weather`: 天气与空气质量字段浅合并
- `WeatherWidget`: 天气小组件状态与刷新触发器
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from app.core.logger import setup_logger
from app.schemas.weather import WeatherData
from app.utils.scheduler import PeriodicTask
from app.widgets.api_client import SiteApiClient
from app.widgets.geolocation import AUTO_CITY, LocationResolver
from app.widgets.storage import CityStorage

logger = setup_logger("WeatherWidget")

WEATHER_REFRESH_INTERVAL = 30 * 60


def merge_weather(weather: WeatherData, air: Dict[str, Any]) -> WeatherData:
    if not air:
        return weather
    merged = weather.model_dump(by_alias=True)
    merged.update({k: v for k, v in air.items() if v is not None})
    return WeatherData.model_validate(merged)


class WeatherWidget:
    """
    输入:
    - `api`: 导航站接口客户端
    - `storage`: 城市本地存储
    - `resolver`: 定位链（默认按配置组装）

    输出:
    - `weather_data` / `loading` / `error` / `current_city` / `is_refreshing` 状态

    作用:
    - 每次加载领取递增序号，只有最新一次加载可以写入状态，过期结果直接丢弃
    """

    def __init__(
        self,
        api: Optional[SiteApiClient] = None,
        storage: Optional[CityStorage] = None,
        resolver: Optional[LocationResolver] = None,
        refresh_interval: float = WEATHER_REFRESH_INTERVAL,
    ) -> None:
        self.api = api or SiteApiClient()
        self.storage = storage or CityStorage()
        self.resolver = resolver or LocationResolver(self.api, self.storage)

        self.weather_data: Optional[WeatherData] = None
        self.loading = True
        self.error: Optional[str] = None
        self.current_city = self.resolver.default_city
        self.is_refreshing = False

        self._seq = 0
        self._timer = PeriodicTask(refresh_interval, self._periodic_refresh, name="weather-refresh")

    def _is_latest(self, seq: int) -> bool:
        return seq == self._seq

    async def load(self, city: str = AUTO_CITY) -> Optional[WeatherData]:
        self._seq += 1
        seq = self._seq
        self.loading = True
        self.error = None
        if city == AUTO_CITY:
            self.is_refreshing = True

        try:
            resolved = await self.resolver.resolve(city)
            if self._is_latest(seq):
                self.current_city = resolved.location

            weather, air = await asyncio.gather(
                self.api.fetch_weather(resolved.location),
                self.api.fetch_air_quality(resolved.location, resolved.coords),
            )
            data = merge_weather(weather, air)
            if not self._is_latest(seq):
                logger.debug(f"丢弃过期的天气结果: {resolved.location}")
                return data
            self.weather_data = data
            logger.info(f"🌤️ 天气已更新: {data.location} {data.temperature}° {data.condition}")
            return data
        except Exception as e:
            logger.error(f"❌ 加载天气数据失败: {e}")
            if self._is_latest(seq):
                self.error = str(e) or "未知错误"
            return None
        finally:
            if self._is_latest(seq):
                self.loading = False
                self.is_refreshing = False

    async def refresh(self) -> Optional[WeatherData]:
        return await self.load(AUTO_CITY)

    async def update_city(self, city: str) -> Optional[WeatherData]:
        city = city.strip()
        if not city:
            return self.weather_data
        return await self.load(city)

    async def clear_saved_city(self) -> Optional[WeatherData]:
        self.storage.clear_city()
        return await self.load(AUTO_CITY)

    async def _load_stored_or_auto(self) -> Optional[WeatherData]:
        return await self.load(self.storage.get_city() or AUTO_CITY)

    async def _periodic_refresh(self) -> None:
        await self._load_stored_or_auto()

    async def start(self) -> None:
        await self._load_stored_or_auto()
        self._timer.start()

    async def stop(self) -> None:
        await self._timer.cancel()
