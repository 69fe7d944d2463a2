from __future__ import annotations

import asyncio

import pytest

from app.core.exceptions import CityNotFoundError, WeatherServiceError
from app.schemas.weather import GeoCoordinates
from app.widgets.geolocation import DevicePosition, LocationResolver
from app.widgets.weather import WeatherWidget
from conftest import FakeSiteApi

WEATHER_OK = (200, {"location": "杭州", "temp": 21, "text": "多云", "icon": "101", "tempMin": 15, "tempMax": 24})
AIR_OK = (
    200,
    {
        "aqi": 42,
        "aqiDisplay": "42",
        "level": "1",
        "category": "优",
        "color": {"red": 0, "green": 228, "blue": 0, "alpha": 1},
        "primaryPollutant": None,
    },
)


class NoDevice:
    async def current_position(self) -> GeoCoordinates:
        raise RuntimeError("Geolocation is not supported")


def _widget(api: FakeSiteApi, storage) -> WeatherWidget:
    resolver = LocationResolver(api, storage, position=DevicePosition(NoDevice()), default_city="杭州")
    return WeatherWidget(api=api, storage=storage, resolver=resolver)


@pytest.mark.asyncio
async def test_fetch_weather_error_mapping() -> None:
    api = FakeSiteApi({"/api/weather": (404, {"error": "x"})})
    with pytest.raises(CityNotFoundError, match="找不到城市 火星 的天气数据"):
        await api.fetch_weather("火星")

    api.routes["/api/weather"] = (503, None)
    with pytest.raises(WeatherServiceError, match="HTTP状态码: 503"):
        await api.fetch_weather("杭州")

    api.routes["/api/weather"] = (200, {"error": "配额已用完"})
    with pytest.raises(WeatherServiceError, match="配额已用完"):
        await api.fetch_weather("杭州")


@pytest.mark.asyncio
async def test_air_quality_prefers_coordinates() -> None:
    api = FakeSiteApi({"/api/weather/air": AIR_OK})

    await api.fetch_air_quality("杭州", GeoCoordinates(latitude=30.2, longitude=120.1))
    await api.fetch_air_quality("杭州")

    assert api.calls[0][1] == {"lat": 30.2, "lon": 120.1}
    assert api.calls[1][1] == {"location": "杭州"}


@pytest.mark.asyncio
async def test_air_quality_failure_does_not_block_weather(city_storage) -> None:
    api = FakeSiteApi({"/api/weather": WEATHER_OK, "/api/weather/air": RuntimeError("timeout")})
    widget = _widget(api, city_storage)

    data = await widget.update_city("杭州")

    assert data is not None
    assert data.temperature == 21
    assert data.condition == "多云"
    assert not data.has_air_quality
    assert widget.error is None
    assert widget.loading is False


@pytest.mark.asyncio
async def test_weather_and_air_quality_are_merged(city_storage) -> None:
    api = FakeSiteApi({"/api/weather": WEATHER_OK, "/api/weather/air": AIR_OK})
    widget = _widget(api, city_storage)

    data = await widget.update_city("杭州")

    assert data.aqi == 42
    assert data.aqi_category == "优"
    assert data.aqi_color.green == 228
    assert widget.weather_data == data
    assert widget.current_city == "杭州"


@pytest.mark.asyncio
async def test_weather_failure_sets_error(city_storage) -> None:
    api = FakeSiteApi({"/api/weather": (404, {"error": "not found"}), "/api/weather/air": AIR_OK})
    widget = _widget(api, city_storage)

    assert await widget.update_city("火星") is None
    assert widget.error == "找不到城市 火星 的天气数据"
    assert widget.loading is False


@pytest.mark.asyncio
async def test_auto_refresh_uses_fallback_chain(city_storage) -> None:
    api = FakeSiteApi(
        {
            "/api/weather/ip": (200, {"location": "苏州", "latitude": 31.3, "longitude": 120.6}),
            "/api/weather": (200, {"location": "苏州", "temp": 18, "text": "晴"}),
            "/api/weather/air": AIR_OK,
        }
    )
    widget = _widget(api, city_storage)

    data = await widget.refresh()

    assert data.location == "苏州"
    assert widget.is_refreshing is False
    air_params = [params for path, params in api.calls if path == "/api/weather/air"][0]
    assert air_params == {"lat": 31.3, "lon": 120.6}


@pytest.mark.asyncio
async def test_clear_saved_city_then_auto(city_storage) -> None:
    city_storage.set_city("广州")
    api = FakeSiteApi({"/api/weather": WEATHER_OK, "/api/weather/ip": (500, {"location": "未知位置"})})
    widget = _widget(api, city_storage)

    await widget.clear_saved_city()

    assert city_storage.get_city() is None
    assert widget.current_city == "杭州"


@pytest.mark.asyncio
async def test_start_uses_stored_city(city_storage) -> None:
    city_storage.set_city("厦门")
    api = FakeSiteApi({"/api/weather": (200, {"location": "厦门", "temp": 25, "text": "晴"})})
    widget = _widget(api, city_storage)

    await widget.start()
    try:
        assert widget.current_city == "厦门"
        assert api.calls[0] == ("/api/weather", {"city": "厦门"})
    finally:
        await widget.stop()


@pytest.mark.asyncio
async def test_stale_load_does_not_overwrite_newer_result(city_storage) -> None:
    release_slow = asyncio.Event()

    async def weather(params):
        if params["city"] == "慢城":
            await release_slow.wait()
        return 200, {"location": params["city"], "temp": 10, "text": "阴"}

    api = FakeSiteApi({"/api/weather": weather})
    widget = _widget(api, city_storage)

    slow = asyncio.create_task(widget.update_city("慢城"))
    await asyncio.sleep(0)
    await widget.update_city("快城")
    release_slow.set()
    await slow

    assert widget.weather_data.location == "快城"
    assert widget.current_city == "快城"
    assert widget.loading is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "air_response",
    [
        (200, {"error": "暂无空气质量数据"}),
        (502, {"error": "天气服务响应错误: HTTP 500"}),
        (500, None),
    ],
)
async def test_air_quality_error_responses_leave_weather_intact(city_storage, air_response) -> None:
    api = FakeSiteApi({"/api/weather": WEATHER_OK, "/api/weather/air": air_response})
    widget = _widget(api, city_storage)

    data = await widget.update_city("杭州")

    assert data is not None
    assert data.temperature == 21
    assert not data.has_air_quality
    assert widget.error is None


@pytest.mark.asyncio
async def test_malformed_air_quality_fields_are_ignored(city_storage) -> None:
    malformed = (
        200,
        {"aqi": 42, "aqiDisplay": 42, "level": 1, "color": "rgba(0,228,0,1)", "primaryPollutant": "pm2p5"},
    )
    api = FakeSiteApi({"/api/weather": WEATHER_OK, "/api/weather/air": malformed})
    widget = _widget(api, city_storage)

    assert await api.fetch_air_quality("杭州") == {}

    data = await widget.update_city("杭州")

    assert data is not None
    assert data.condition == "多云"
    assert not data.has_air_quality
    assert widget.error is None
    assert widget.weather_data == data
