from __future__ import annotations

import asyncio

import pytest

from app.core.exceptions import LocationResolutionError
from app.schemas.weather import GeoCoordinates
from app.widgets.geolocation import (
    DevicePosition,
    LocationResolver,
    LocationResult,
    StaticPositionProvider,
    resolve_first,
)
from conftest import FakeClock, FakeSiteApi


class FailingProvider:
    def __init__(self) -> None:
        self.calls = 0

    async def current_position(self) -> GeoCoordinates:
        self.calls += 1
        raise LocationResolutionError("User denied Geolocation")


class CountingProvider:
    def __init__(self, delay: float = 0.0) -> None:
        self.calls = 0
        self.delay = delay

    async def current_position(self) -> GeoCoordinates:
        self.calls += 1
        await asyncio.sleep(self.delay)
        return GeoCoordinates(latitude=30.27, longitude=120.15)


def _resolver(api, storage, provider, default_city: str = "杭州") -> LocationResolver:
    return LocationResolver(api, storage, position=DevicePosition(provider), default_city=default_city)


@pytest.mark.asyncio
async def test_device_failure_falls_back_to_ip(city_storage) -> None:
    api = FakeSiteApi({"/api/weather/ip": (200, {"location": "上海", "latitude": 31.2, "longitude": 121.4})})

    resolved = await _resolver(api, city_storage, FailingProvider()).resolve("auto")

    assert resolved.location == "上海"
    assert resolved.coords == GeoCoordinates(latitude=31.2, longitude=121.4)
    assert api.paths() == ["/api/weather/ip"]


@pytest.mark.asyncio
async def test_unknown_reverse_geocode_still_tries_ip(city_storage) -> None:
    api = FakeSiteApi(
        {
            "/api/weather/geo": (200, {"location": "未知位置"}),
            "/api/weather/ip": (200, {"location": "北京"}),
        }
    )

    resolved = await _resolver(api, city_storage, CountingProvider()).resolve("auto")

    assert resolved.location == "北京"
    assert resolved.coords is None
    assert api.paths() == ["/api/weather/geo", "/api/weather/ip"]


@pytest.mark.asyncio
async def test_device_and_reverse_geocode_success_stops_chain(city_storage) -> None:
    api = FakeSiteApi({"/api/weather/geo": (200, {"location": "杭州市"})})

    resolved = await _resolver(api, city_storage, CountingProvider()).resolve("auto")

    assert resolved.location == "杭州市"
    assert resolved.coords.latitude == 30.27
    assert api.paths() == ["/api/weather/geo"]


@pytest.mark.asyncio
async def test_everything_failing_uses_default_city(city_storage) -> None:
    api = FakeSiteApi({"/api/weather/ip": RuntimeError("network down")})

    resolved = await _resolver(api, city_storage, FailingProvider(), default_city="成都").resolve("auto")

    assert resolved.location == "成都"
    assert resolved.coords is None


@pytest.mark.asyncio
async def test_explicit_city_is_verbatim_and_persisted(city_storage) -> None:
    api = FakeSiteApi()

    resolved = await _resolver(api, city_storage, FailingProvider()).resolve("广州")

    assert resolved.location == "广州"
    assert resolved.coords is None
    assert api.calls == []
    assert city_storage.get_city() == "广州"


@pytest.mark.asyncio
async def test_resolve_first_reports_last_error() -> None:
    async def fail_a() -> LocationResult:
        return LocationResult.failure("a failed")

    async def fail_b() -> LocationResult:
        raise RuntimeError("b exploded")

    with pytest.raises(LocationResolutionError, match="b exploded"):
        await resolve_first([("a", fail_a), ("b", fail_b)])


@pytest.mark.asyncio
async def test_device_position_reuses_recent_fix() -> None:
    clock = FakeClock(0.0)
    provider = CountingProvider()
    position = DevicePosition(provider, maximum_age=600, clock=clock)

    await position.get_current_position()
    clock.advance(599)
    await position.get_current_position()
    assert provider.calls == 1

    clock.advance(2)
    await position.get_current_position()
    assert provider.calls == 2


@pytest.mark.asyncio
async def test_device_position_times_out() -> None:
    position = DevicePosition(CountingProvider(delay=1.0), timeout=0.01)
    with pytest.raises(LocationResolutionError):
        await position.get_current_position()


@pytest.mark.asyncio
async def test_static_provider_without_coordinates_is_unsupported() -> None:
    provider = StaticPositionProvider()
    provider.latitude = None
    with pytest.raises(LocationResolutionError):
        await provider.current_position()
