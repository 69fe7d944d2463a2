"""
本文件用于为天气小组件确定查询地点：显式城市直接使用，自动模式按“设备定位 → IP 定位 → 默认城市”逐级降级。
主要函数/类:
- `PositionProvider` / `StaticPositionProvider`: 设备坐标来源
- `DevicePosition`: 带超时与缓存有效期的设备定位
- `LocationResult`: 单个定位策略的统一返回值（成功/失败）
- `resolve_first`: 依次执行策略，返回第一个成功结果
- `LocationResolver`: 组装自动定位链并处理显式城市
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence, Tuple

from app.core.config import get_settings
from app.core.exceptions import LocationResolutionError
from app.core.logger import setup_logger
from app.schemas.weather import GeoCoordinates, ResolvedLocation
from app.widgets.api_client import SiteApiClient
from app.widgets.storage import CityStorage

settings = get_settings()
logger = setup_logger("Geolocation")

AUTO_CITY = "auto"
GEOLOCATION_TIMEOUT = 10.0
GEOLOCATION_MAX_AGE = 10 * 60


class PositionProvider(Protocol):
    async def current_position(self) -> GeoCoordinates: ...


class StaticPositionProvider:
    """使用配置中的固定经纬度作为设备位置；未配置时视为设备不支持定位。"""

    def __init__(self, latitude: Optional[float] = None, longitude: Optional[float] = None) -> None:
        self.latitude = latitude if latitude is not None else settings.WIDGET_LATITUDE
        self.longitude = longitude if longitude is not None else settings.WIDGET_LONGITUDE

    async def current_position(self) -> GeoCoordinates:
        if self.latitude is None or self.longitude is None:
            raise LocationResolutionError("当前设备不支持地理定位")
        return GeoCoordinates(latitude=self.latitude, longitude=self.longitude)


class DevicePosition:
    """
    输入:
    - `provider`: 坐标来源
    - `timeout`: 单次定位超时（秒）
    - `maximum_age`: 可接受的缓存坐标最大年龄（秒）
    - `clock`: 时钟函数（测试可注入）

    输出:
    - `GeoCoordinates`

    作用:
    - 缓存期内复用上一次坐标；超时抛出 `LocationResolutionError`
    """

    def __init__(
        self,
        provider: Optional[PositionProvider] = None,
        timeout: float = GEOLOCATION_TIMEOUT,
        maximum_age: float = GEOLOCATION_MAX_AGE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.provider = provider or StaticPositionProvider()
        self.timeout = timeout
        self.maximum_age = maximum_age
        self._clock = clock
        self._last: Optional[Tuple[float, GeoCoordinates]] = None

    async def get_current_position(self) -> GeoCoordinates:
        if self._last and self._clock() - self._last[0] <= self.maximum_age:
            return self._last[1]
        try:
            coords = await asyncio.wait_for(self.provider.current_position(), self.timeout)
        except asyncio.TimeoutError as e:
            raise LocationResolutionError("设备定位超时") from e
        self._last = (self._clock(), coords)
        return coords


@dataclass(frozen=True)
class LocationResult:
    location: Optional[ResolvedLocation] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.location is not None

    @classmethod
    def success(cls, location: ResolvedLocation) -> "LocationResult":
        return cls(location=location)

    @classmethod
    def failure(cls, error: str) -> "LocationResult":
        return cls(error=error)


LocationStrategy = Callable[[], Awaitable[LocationResult]]


async def resolve_first(strategies: Sequence[Tuple[str, LocationStrategy]]) -> ResolvedLocation:
    """
    输入:
    - `strategies`: `(名称, 策略)` 列表，按优先级排列

    输出:
    - 第一个成功策略的 `ResolvedLocation`

    作用:
    - 策略抛出的异常等同于失败结果；全部失败时抛出携带最后一个错误信息的 `LocationResolutionError`
    """

    last_error: Optional[str] = None
    for name, strategy in strategies:
        try:
            result = await strategy()
        except Exception as e:
            result = LocationResult.failure(str(e) or e.__class__.__name__)
        if result.ok:
            logger.debug(f"📍 定位成功 [{name}]: {result.location.location}")
            return result.location  # type: ignore[return-value]
        last_error = result.error
        logger.info(f"定位策略 {name} 失败，尝试下一个: {result.error}")
    raise LocationResolutionError(last_error or "无法确定当前位置")


def device_strategy(position: DevicePosition, api: SiteApiClient) -> LocationStrategy:
    async def run() -> LocationResult:
        coords = await position.get_current_position()
        name = await api.get_location_from_geo(coords)
        if not name:
            return LocationResult.failure("逆地理编码未返回可用地名")
        return LocationResult.success(ResolvedLocation(location=name, coords=coords))

    return run


def ip_strategy(api: SiteApiClient) -> LocationStrategy:
    async def run() -> LocationResult:
        resolved = await api.get_location_from_ip()
        if resolved is None:
            return LocationResult.failure("IP 定位未返回可用地名")
        return LocationResult.success(resolved)

    return run


def default_strategy(city: str) -> LocationStrategy:
    async def run() -> LocationResult:
        return LocationResult.success(ResolvedLocation(location=city))

    return run


class LocationResolver:
    def __init__(
        self,
        api: SiteApiClient,
        storage: CityStorage,
        position: Optional[DevicePosition] = None,
        default_city: Optional[str] = None,
    ) -> None:
        self.api = api
        self.storage = storage
        self.position = position or DevicePosition()
        self.default_city = default_city or settings.DEFAULT_CITY

    def auto_strategies(self) -> List[Tuple[str, LocationStrategy]]:
        return [
            ("device", device_strategy(self.position, self.api)),
            ("ip", ip_strategy(self.api)),
            ("default", default_strategy(self.default_city)),
        ]

    async def resolve(self, city: str = AUTO_CITY) -> ResolvedLocation:
        """
        输入:
        - `city`: 城市名，或 `auto` 表示自动定位

        输出:
        - `ResolvedLocation`（显式城市不带坐标）

        作用:
        - 显式城市会写入本地存储，作为之后定时刷新的城市
        """

        if city != AUTO_CITY:
            self.storage.set_city(city)
            return ResolvedLocation(location=city)
        return await resolve_first(self.auto_strategies())
